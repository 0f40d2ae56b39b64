"""
Lead repository.
"""
import uuid
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.models.columns import utcnow
from lead_qualifier.models.lead import Lead
from lead_qualifier.repositories.base import BaseRepository
from lead_qualifier.schemas.scoring import QualificationResult


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def get_for_org(self, org_id: uuid.UUID, lead_id: uuid.UUID) -> Optional[Lead]:
        """Get a lead only if it belongs to the organization."""
        query = select(Lead).where(Lead.id == lead_id, Lead.org_id == org_id)
        result = await self._exec(query, "Get lead")
        return result.first()

    async def save_qualification(self, lead: Lead, result: QualificationResult) -> Lead:
        """Store the latest qualification result on the lead."""
        now = utcnow()
        return await self.update(lead, {
            "score": result.score,
            "label": result.label.value,
            "reasoning": result.reasoning,
            "breakdown": {name: item.model_dump() for name, item in result.breakdown.items()},
            "recommended_action": result.recommended_action,
            "qualification_status": "qualified",
            "qualified_at": now,
        })

    async def update_status(self, lead: Lead, status: str) -> Lead:
        return await self.update(lead, {"status": status})
