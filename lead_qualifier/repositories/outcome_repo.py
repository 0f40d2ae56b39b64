"""
Outcome repository, also the SQL source of training data.
"""
import bisect
import logging
import uuid
from collections import defaultdict
from typing import Dict, List, Optional
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from lead_qualifier.models.outcome import LeadOutcome
from lead_qualifier.models.scoring import ScoringHistory
from lead_qualifier.repositories.base import BaseRepository
from lead_qualifier.repositories.interfaces import TrainingDataRepository
from lead_qualifier.schemas.features import deserialize_features
from lead_qualifier.schemas.outcome import OutcomeCreate, OutcomeType, TrainingExample

logger = logging.getLogger(__name__)


class OutcomeRepository(BaseRepository[LeadOutcome], TrainingDataRepository):
    """Repository for LeadOutcome operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadOutcome, session)

    async def record(
        self,
        org_id: uuid.UUID,
        lead_id: uuid.UUID,
        outcome_in: OutcomeCreate,
        days_to_outcome: Optional[int] = None,
        recorded_by: Optional[uuid.UUID] = None
    ) -> LeadOutcome:
        return await self.create({
            "org_id": org_id,
            "lead_id": lead_id,
            "outcome_type": outcome_in.outcome_type.value,
            "outcome_value": outcome_in.outcome_value,
            "days_to_outcome": days_to_outcome,
            "notes": outcome_in.notes,
            "recorded_by": recorded_by,
        })

    async def list_for_lead(self, org_id: uuid.UUID, lead_id: uuid.UUID) -> List[LeadOutcome]:
        """Outcomes of a lead, newest first."""
        query = select(LeadOutcome).where(
            LeadOutcome.org_id == org_id,
            LeadOutcome.lead_id == lead_id
        ).order_by(LeadOutcome.created_at.desc())
        result = await self._exec(query, "List outcomes")
        return result.all()

    async def fetch_outcomes_with_features(self, organization_id: uuid.UUID) -> List[TrainingExample]:
        outcomes_query = select(LeadOutcome).where(
            LeadOutcome.org_id == organization_id
        ).order_by(LeadOutcome.created_at)
        outcomes = (await self._exec(outcomes_query, "Load outcomes")).all()
        if not outcomes:
            return []

        history_query = select(ScoringHistory).where(
            ScoringHistory.org_id == organization_id
        ).order_by(ScoringHistory.created_at)
        history = (await self._exec(history_query, "Load scoring history")).all()

        by_lead = defaultdict(list)
        for entry in history:
            by_lead[entry.lead_id].append(entry)

        examples = []
        for outcome in outcomes:
            entries = by_lead.get(outcome.lead_id)
            if not entries:
                continue
            # Latest vector recorded at or before the outcome
            idx = bisect.bisect_right([e.created_at for e in entries], outcome.created_at)
            if idx == 0:
                continue
            try:
                outcome_type = OutcomeType(outcome.outcome_type)
            except ValueError:
                logger.warning(f"Skipping outcome {outcome.id} with unknown type '{outcome.outcome_type}'")
                continue
            examples.append(TrainingExample(
                features=deserialize_features(entries[idx - 1].feature_vector),
                outcome=outcome_type,
                outcome_value=outcome.outcome_value,
                days_to_outcome=outcome.days_to_outcome,
            ))
        return examples

    async def count_outcomes(self, organization_id: uuid.UUID) -> int:
        return await self.count(organization_id)

    async def count_outcomes_since(self, organization_id: uuid.UUID, since: datetime) -> int:
        query = select(func.count()).select_from(LeadOutcome).where(
            LeadOutcome.org_id == organization_id,
            LeadOutcome.created_at > since
        )
        result = await self._exec(query, "Count outcomes")
        return result.one()

    async def outcome_breakdown(self, organization_id: uuid.UUID) -> Dict[str, int]:
        query = select(LeadOutcome.outcome_type, func.count()).where(
            LeadOutcome.org_id == organization_id
        ).group_by(LeadOutcome.outcome_type)
        result = await self._exec(query, "Count outcomes by type")
        return {outcome_type: count for outcome_type, count in result.all()}
