"""
Training service - retraining, model history and rollback.
"""
import logging
import uuid
from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.config import settings
from lead_qualifier.core.exceptions import raise_not_found, raise_validation_error
from lead_qualifier.models.activity import Actions
from lead_qualifier.repositories.activity_repo import ActivityLogRepository
from lead_qualifier.repositories.interfaces import ModelRepository, TrainingDataRepository
from lead_qualifier.repositories.outcome_repo import OutcomeRepository
from lead_qualifier.repositories.scoring_repo import ScoringModelRepository
from lead_qualifier.schemas.scoring import ModelStats, ScoringModelRecord, TrainingResult
from lead_qualifier.scoring.learner import ModelTrainer

logger = logging.getLogger(__name__)


async def should_retrain_model(
    training_data: TrainingDataRepository,
    models: ModelRepository,
    organization_id: uuid.UUID,
    threshold: int = 50,
) -> bool:
    """
    True once enough outcomes have been recorded since the active model was
    published, or in total when there is no model yet.
    """
    current_model = await models.get_active_model(organization_id)
    if current_model is None or current_model.created_at is None:
        return await training_data.count_outcomes(organization_id) >= threshold
    new_outcomes = await training_data.count_outcomes_since(organization_id, current_model.created_at)
    return new_outcomes >= threshold


class TrainingService:
    """Service for scoring model lifecycle."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.outcome_repo = OutcomeRepository(session)
        self.model_repo = ScoringModelRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    def _trainer(self) -> ModelTrainer:
        return ModelTrainer(
            self.outcome_repo,
            self.model_repo,
            min_examples=settings.MIN_TRAINING_EXAMPLES,
            train_ratio=settings.TRAIN_TEST_SPLIT,
            accuracy_threshold=settings.MIN_MODEL_ACCURACY,
            include_behavioral=settings.ENABLE_BEHAVIORAL_FEATURES,
            seed=settings.TRAINING_SEED,
        )

    async def should_retrain(self, org_id: uuid.UUID) -> bool:
        return await should_retrain_model(
            self.outcome_repo, self.model_repo, org_id, settings.RETRAIN_OUTCOME_THRESHOLD
        )

    async def retrain(self, org_id: uuid.UUID, actor_id: Optional[uuid.UUID] = None) -> TrainingResult:
        """Train a new model from recorded outcomes and publish it if it validates."""
        result = await self._trainer().train(org_id)

        if result.success:
            await self.activity_repo.log(
                org_id=org_id,
                action=Actions.MODEL_RETRAINED,
                entity_type="scoring_model",
                entity_id=result.model.id,
                actor_id=actor_id,
                description=f"Scoring model v{result.model.model_version} published",
                meta_data={
                    "model_version": result.model.model_version,
                    "trained_on_count": result.examples_count,
                    "accuracy": result.metrics.accuracy,
                }
            )
        else:
            logger.info(f"Retraining for org {org_id} did not publish a model: {result.error}")
        return result

    async def get_model_stats(self, org_id: uuid.UUID) -> ModelStats:
        current_model = await self.model_repo.get_active_model(org_id)
        return ModelStats(
            current_model=current_model,
            total_outcomes=await self.outcome_repo.count_outcomes(org_id),
            outcome_breakdown=await self.outcome_repo.outcome_breakdown(org_id),
            retraining_recommended=await self.should_retrain(org_id),
        )

    async def list_models(self, org_id: uuid.UUID) -> List[ScoringModelRecord]:
        return await self.model_repo.list_models(org_id)

    async def rollback(
        self,
        org_id: uuid.UUID,
        model_version: int,
        actor_id: Optional[uuid.UUID] = None
    ) -> ScoringModelRecord:
        """Re-activate a retained model version."""
        if model_version < 1:
            raise_validation_error("model versions start at 1", "model_version")
        model = await self.model_repo.activate_version(org_id, model_version)
        if not model:
            raise_not_found("Scoring model", str(model_version))

        await self.activity_repo.log(
            org_id=org_id,
            action=Actions.MODEL_ROLLED_BACK,
            entity_type="scoring_model",
            entity_id=model.id,
            actor_id=actor_id,
            description=f"Scoring model v{model_version} re-activated",
            meta_data={"model_version": model_version}
        )
        logger.info(f"Rolled back org {org_id} to scoring model v{model_version}")
        return model
