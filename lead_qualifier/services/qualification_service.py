"""
Qualification service - scores a lead against its organization's ICP and
active scoring model, and records the result.
"""
import logging
import uuid
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.config import settings
from lead_qualifier.core.exceptions import raise_not_found
from lead_qualifier.models.activity import Actions
from lead_qualifier.repositories.activity_repo import ActivityLogRepository
from lead_qualifier.repositories.enrichment_repo import BehavioralScoreRepository, LeadTrackingRepository
from lead_qualifier.repositories.icp_repo import ICPCriterionRepository
from lead_qualifier.repositories.lead_repo import LeadRepository
from lead_qualifier.repositories.scoring_repo import ScoringHistoryRepository, ScoringModelRepository
from lead_qualifier.schemas.features import FeatureVector
from lead_qualifier.schemas.scoring import QualificationResult
from lead_qualifier.scoring.extractor import extract_features
from lead_qualifier.scoring.scorer import (
    build_breakdown, build_reasoning, calculate_weighted_score, get_score_label, recommend_action
)
from lead_qualifier.services.enrichment_service import EnrichmentService
from lead_qualifier.services.integrations.base import EnrichmentProvider

logger = logging.getLogger(__name__)


def qualify(
    lead: Any,
    criteria: Optional[Iterable[Any]] = None,
    enrichment: Any = None,
    behavioral: Any = None,
    tracking: Any = None,
    weights: Optional[Mapping[str, float]] = None,
    model_version: Optional[int] = None,
    include_behavioral: bool = True,
) -> Tuple[FeatureVector, QualificationResult]:
    """Extract features and score them. Pure; nothing is stored."""
    features = extract_features(lead, criteria, enrichment, behavioral, tracking)
    score = calculate_weighted_score(features, weights, include_behavioral)
    label = get_score_label(score)

    result = QualificationResult(
        score=score,
        label=label,
        reasoning=build_reasoning(label, enrichment),
        breakdown=build_breakdown(features, enrichment),
        recommended_action=recommend_action(label, features),
        model_version=model_version,
    )
    return features, result


class QualificationService:
    """Service for lead qualification."""

    def __init__(
        self,
        session: AsyncSession,
        providers: Optional[Sequence[EnrichmentProvider]] = None,
        include_behavioral: Optional[bool] = None
    ):
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.icp_repo = ICPCriterionRepository(session)
        self.behavioral_repo = BehavioralScoreRepository(session)
        self.tracking_repo = LeadTrackingRepository(session)
        self.model_repo = ScoringModelRepository(session)
        self.history_repo = ScoringHistoryRepository(session)
        self.activity_repo = ActivityLogRepository(session)
        self.enrichment_service = EnrichmentService(session, providers)
        if include_behavioral is None:
            include_behavioral = settings.ENABLE_BEHAVIORAL_FEATURES
        self.include_behavioral = include_behavioral

    async def qualify_lead(
        self,
        org_id: uuid.UUID,
        lead_id: uuid.UUID,
        actor_id: Optional[uuid.UUID] = None
    ) -> QualificationResult:
        """
        Qualify a lead and persist the result.

        Scores with the organization's active model, or the default weights
        when none has been trained. A stored model with unusable weights
        raises CorruptModelError rather than falling back to the defaults.
        """
        lead = await self.lead_repo.get_for_org(org_id, lead_id)
        if not lead:
            raise_not_found("Lead", str(lead_id))

        criteria = await self.icp_repo.get_for_org(org_id)
        enrichment = await self.enrichment_service.get_or_enrich(lead)
        behavioral = await self.behavioral_repo.get_for_lead(lead.id) if self.include_behavioral else None
        tracking = await self.tracking_repo.get_for_lead(lead.id)

        model = await self.model_repo.get_active_model(org_id)

        features, result = qualify(
            lead,
            criteria,
            enrichment,
            behavioral,
            tracking,
            weights=model.feature_weights if model else None,
            model_version=model.model_version if model else None,
            include_behavioral=self.include_behavioral,
        )

        await self.lead_repo.save_qualification(lead, result)
        await self.history_repo.record(
            org_id, lead.id, features, result.score, result.label, result.model_version
        )
        await self.activity_repo.log(
            org_id=org_id,
            action=Actions.LEAD_QUALIFIED,
            entity_type="lead",
            entity_id=lead.id,
            actor_id=actor_id,
            description=f"Lead {lead.email} qualified as {result.label.value} ({result.score})",
            meta_data={
                "score": result.score,
                "label": result.label.value,
                "model_version": result.model_version,
            }
        )

        logger.info(
            f"Qualified lead {lead.id} for org {org_id}: {result.score} {result.label.value} "
            f"(model v{result.model_version or 'default'})"
        )
        return result
