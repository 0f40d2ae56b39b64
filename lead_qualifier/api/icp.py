"""
ICP API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.database import get_session
from lead_qualifier.services.icp_service import ICPService
from lead_qualifier.schemas.icp import ICPCriterionData, ICPCriterionResponse
from lead_qualifier.api.deps import get_org_id

router = APIRouter(prefix="/api/icp", tags=["icp"])


@router.get("/criteria", response_model=List[ICPCriterionResponse])
async def list_criteria(
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """List the organization's ICP criteria in display order."""
    icp_service = ICPService(session)
    return await icp_service.list(org_id)


@router.post("/criteria", response_model=ICPCriterionResponse, status_code=201)
async def create_criterion(
    criterion_in: ICPCriterionData,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Add a criterion to the ICP."""
    icp_service = ICPService(session)
    return await icp_service.create(org_id, criterion_in)


@router.delete("/criteria/{criterion_id}", status_code=204)
async def delete_criterion(
    criterion_id: uuid.UUID,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Remove a criterion from the ICP."""
    icp_service = ICPService(session)
    await icp_service.delete(org_id, criterion_id)
