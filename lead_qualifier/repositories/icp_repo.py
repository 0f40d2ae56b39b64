"""
ICP criterion repository.
"""
import uuid
from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.models.icp import ICPCriterion
from lead_qualifier.repositories.base import BaseRepository


class ICPCriterionRepository(BaseRepository[ICPCriterion]):
    """Repository for ICPCriterion operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ICPCriterion, session)

    async def get_for_org(self, org_id: uuid.UUID) -> List[ICPCriterion]:
        """All criteria of an organization, in display order."""
        query = select(ICPCriterion).where(
            ICPCriterion.org_id == org_id
        ).order_by(ICPCriterion.sort_order, ICPCriterion.created_at)
        result = await self._exec(query, "List ICP criteria")
        return result.all()

    async def get_by_id_for_org(self, org_id: uuid.UUID, criterion_id: uuid.UUID) -> Optional[ICPCriterion]:
        query = select(ICPCriterion).where(
            ICPCriterion.id == criterion_id, ICPCriterion.org_id == org_id
        )
        result = await self._exec(query, "Get ICP criterion")
        return result.first()
