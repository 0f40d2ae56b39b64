"""
Lead service - lead intake and lookup.
"""
import logging
import uuid

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.core.exceptions import raise_not_found
from lead_qualifier.models.activity import Actions
from lead_qualifier.models.lead import Lead
from lead_qualifier.repositories.activity_repo import ActivityLogRepository
from lead_qualifier.repositories.lead_repo import LeadRepository
from lead_qualifier.schemas.lead import LeadCreate

logger = logging.getLogger(__name__)


class LeadService:
    """Service for lead operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def create(self, org_id: uuid.UUID, lead_in: LeadCreate) -> Lead:
        """Store a form submission. Qualification is a separate step."""
        data = lead_in.model_dump()
        data["org_id"] = org_id
        lead = await self.lead_repo.create(data)

        await self.activity_repo.log(
            org_id=org_id,
            action=Actions.LEAD_CREATED,
            entity_type="lead",
            entity_id=lead.id,
            description=f"Lead '{lead.email}' created",
            meta_data={"email": lead.email, "company_name": lead.company_name}
        )
        logger.info(f"Lead {lead.id} created for org {org_id}")
        return lead

    async def get(self, org_id: uuid.UUID, lead_id: uuid.UUID) -> Lead:
        """Get a lead of the organization, 404 otherwise."""
        lead = await self.lead_repo.get_for_org(org_id, lead_id)
        if not lead:
            raise_not_found("Lead", str(lead_id))
        return lead
