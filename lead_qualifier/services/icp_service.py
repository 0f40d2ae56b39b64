"""
ICP service - manages the criteria leads are matched against.
"""
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.core.exceptions import raise_not_found
from lead_qualifier.models.activity import Actions
from lead_qualifier.models.icp import ICPCriterion
from lead_qualifier.repositories.activity_repo import ActivityLogRepository
from lead_qualifier.repositories.icp_repo import ICPCriterionRepository
from lead_qualifier.schemas.icp import ICPCriterionData


class ICPService:
    """Service for ICP criterion operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.icp_repo = ICPCriterionRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def list(self, org_id: uuid.UUID) -> List[ICPCriterion]:
        return await self.icp_repo.get_for_org(org_id)

    async def create(self, org_id: uuid.UUID, criterion_in: ICPCriterionData) -> ICPCriterion:
        """Add a criterion to the organization's profile."""
        data = criterion_in.model_dump(mode="json")
        data["org_id"] = org_id
        criterion = await self.icp_repo.create(data)

        await self.activity_repo.log(
            org_id=org_id,
            action=Actions.ICP_CRITERION_CREATED,
            entity_type="icp_criterion",
            entity_id=criterion.id,
            description=f"ICP criterion '{criterion.name}' created",
            meta_data={"type": criterion.type, "weight": criterion.weight}
        )
        return criterion

    async def delete(self, org_id: uuid.UUID, criterion_id: uuid.UUID) -> None:
        """Remove a criterion; later qualifications no longer see it."""
        criterion = await self.icp_repo.get_by_id_for_org(org_id, criterion_id)
        if not criterion:
            raise_not_found("ICP criterion", str(criterion_id))

        name = criterion.name
        await self.icp_repo.delete(criterion)
        await self.activity_repo.log(
            org_id=org_id,
            action=Actions.ICP_CRITERION_DELETED,
            entity_type="icp_criterion",
            entity_id=criterion_id,
            description=f"ICP criterion '{name}' deleted"
        )
