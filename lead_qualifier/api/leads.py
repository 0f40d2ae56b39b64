"""
Leads API routes.
"""
import uuid
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.database import get_session
from lead_qualifier.services.lead_service import LeadService
from lead_qualifier.schemas.lead import LeadCreate, LeadResponse
from lead_qualifier.api.deps import get_org_id

router = APIRouter(prefix="/api/leads", tags=["leads"])


@router.post("/", response_model=LeadResponse, status_code=201)
async def create_lead(
    lead_in: LeadCreate,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Submit a lead for later qualification."""
    lead_service = LeadService(session)
    return await lead_service.create(org_id, lead_in)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: uuid.UUID,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Get a lead with its latest qualification result."""
    lead_service = LeadService(session)
    return await lead_service.get(org_id, lead_id)
