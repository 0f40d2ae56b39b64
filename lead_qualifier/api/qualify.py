"""
Qualification API routes.
"""
import uuid
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.database import get_session
from lead_qualifier.services.qualification_service import QualificationService
from lead_qualifier.services.integrations.enrichment import build_enrichment_providers
from lead_qualifier.schemas.scoring import QualificationResult
from lead_qualifier.api.deps import get_org_id

router = APIRouter(prefix="/api/leads", tags=["qualification"])


@router.post("/{lead_id}/qualify", response_model=QualificationResult)
async def qualify_lead(
    lead_id: uuid.UUID,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Score a lead with the organization's active model and store the result."""
    qualification_service = QualificationService(session, build_enrichment_providers())
    return await qualification_service.qualify_lead(org_id, lead_id)
