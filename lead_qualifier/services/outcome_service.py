"""
Outcome service - records what happened to qualified leads.
"""
import logging
import uuid
from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.core.exceptions import raise_not_found
from lead_qualifier.models.activity import Actions
from lead_qualifier.models.columns import utcnow
from lead_qualifier.models.lead import Lead
from lead_qualifier.models.outcome import LeadOutcome
from lead_qualifier.repositories.activity_repo import ActivityLogRepository
from lead_qualifier.repositories.lead_repo import LeadRepository
from lead_qualifier.repositories.outcome_repo import OutcomeRepository
from lead_qualifier.schemas.outcome import (
    OUTCOME_LEAD_STATUS, OutcomeCreate, OutcomeRecordedResponse, OutcomeResponse
)
from lead_qualifier.services.training_service import TrainingService

logger = logging.getLogger(__name__)


class OutcomeService:
    """Service for outcome operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.outcome_repo = OutcomeRepository(session)
        self.activity_repo = ActivityLogRepository(session)
        self.training_service = TrainingService(session)

    async def _get_lead(self, org_id: uuid.UUID, lead_id: uuid.UUID) -> Lead:
        lead = await self.lead_repo.get_for_org(org_id, lead_id)
        if not lead:
            raise_not_found("Lead", str(lead_id))
        return lead

    async def record_outcome(
        self,
        org_id: uuid.UUID,
        lead_id: uuid.UUID,
        outcome_in: OutcomeCreate,
        recorded_by: Optional[uuid.UUID] = None
    ) -> OutcomeRecordedResponse:
        """Append an outcome, update the lead status and check the retraining gate."""
        lead = await self._get_lead(org_id, lead_id)

        days_to_outcome = outcome_in.days_to_outcome
        if days_to_outcome is None:
            days_to_outcome = max(0, (utcnow() - lead.created_at).days)

        outcome = await self.outcome_repo.record(
            org_id, lead.id, outcome_in, days_to_outcome, recorded_by
        )
        await self.lead_repo.update_status(lead, OUTCOME_LEAD_STATUS[outcome_in.outcome_type])

        await self.activity_repo.log(
            org_id=org_id,
            action=Actions.OUTCOME_RECORDED,
            entity_type="lead",
            entity_id=lead.id,
            actor_id=recorded_by,
            description=f"Outcome recorded: {outcome_in.outcome_type.value}",
            meta_data={
                "outcome_type": outcome_in.outcome_type.value,
                "outcome_value": outcome_in.outcome_value,
                "days_to_outcome": days_to_outcome,
            }
        )

        retraining_recommended = await self.training_service.should_retrain(org_id)
        if retraining_recommended:
            logger.info(f"Retraining recommended for org {org_id}")

        return OutcomeRecordedResponse(
            outcome=OutcomeResponse.model_validate(outcome),
            retraining_recommended=retraining_recommended
        )

    async def list_outcomes(self, org_id: uuid.UUID, lead_id: uuid.UUID) -> List[LeadOutcome]:
        """Outcomes of a lead, newest first."""
        await self._get_lead(org_id, lead_id)
        return await self.outcome_repo.list_for_lead(org_id, lead_id)
