"""
Scoring model and scoring history repositories.
"""
import uuid
from typing import List, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from lead_qualifier.core.exceptions import CorruptModelError
from lead_qualifier.models.scoring import ScoringModel, ScoringHistory
from lead_qualifier.repositories.base import BaseRepository
from lead_qualifier.repositories.interfaces import ModelRepository
from lead_qualifier.schemas.features import FeatureVector, serialize_features
from lead_qualifier.schemas.scoring import ModelDraft, ModelMetrics, ScoreLabel, ScoringModelRecord
from lead_qualifier.scoring.weights import load_weights


class ScoringModelRepository(BaseRepository[ScoringModel], ModelRepository):
    """
    Versioned scoring models.

    Publishing and rollback deactivate the current model and activate
    another in a single transaction, so an organization never has more
    than one active version.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(ScoringModel, session)

    @staticmethod
    def to_record(row: ScoringModel) -> ScoringModelRecord:
        weights = load_weights(row.feature_weights, row.model_version)
        metrics = None
        if row.performance_metrics:
            try:
                metrics = ModelMetrics.model_validate(row.performance_metrics)
            except SchemaValidationError as e:
                raise CorruptModelError(row.model_version, "stored performance metrics are invalid") from e
        return ScoringModelRecord(
            id=row.id,
            organization_id=row.org_id,
            model_version=row.model_version,
            feature_weights=weights,
            performance_metrics=metrics,
            trained_on_count=row.trained_on_count,
            is_active=row.is_active,
            created_at=row.created_at,
        )

    async def get_active_model(self, organization_id: uuid.UUID) -> Optional[ScoringModelRecord]:
        query = select(ScoringModel).where(
            ScoringModel.org_id == organization_id,
            ScoringModel.is_active == True
        ).order_by(ScoringModel.model_version.desc())
        result = await self._exec(query, "Get active scoring model")
        row = result.first()
        return self.to_record(row) if row else None

    async def list_models(self, organization_id: uuid.UUID) -> List[ScoringModelRecord]:
        query = select(ScoringModel).where(
            ScoringModel.org_id == organization_id
        ).order_by(ScoringModel.model_version.desc())
        result = await self._exec(query, "List scoring models")
        return [self.to_record(row) for row in result.all()]

    async def _lock_organization(self, organization_id: uuid.UUID) -> None:
        """
        Serialize publish and rollback per organization until commit.
        Uses a transaction-scoped advisory lock on PostgreSQL; other
        backends rely on the single-active index alone.
        """
        connection = await self.session.connection()
        if connection.dialect.name != "postgresql":
            return
        lock_key = organization_id.int & 0x7FFFFFFFFFFFFFFF
        await self.session.exec(select(func.pg_advisory_xact_lock(lock_key)))

    async def _deactivate_current(self, organization_id: uuid.UUID) -> None:
        await self._lock_organization(organization_id)
        query = select(ScoringModel).where(
            ScoringModel.org_id == organization_id,
            ScoringModel.is_active == True
        )
        result = await self.session.exec(query)
        for model in result.all():
            model.is_active = False
            self.session.add(model)
        # Deactivation must reach the database before another row turns active
        await self.session.flush()

    async def publish_model(self, organization_id: uuid.UUID, draft: ModelDraft) -> ScoringModelRecord:
        try:
            await self._deactivate_current(organization_id)

            version_query = select(func.max(ScoringModel.model_version)).where(
                ScoringModel.org_id == organization_id
            )
            latest_version = (await self.session.exec(version_query)).one()

            model = ScoringModel(
                org_id=organization_id,
                model_version=(latest_version or 0) + 1,
                feature_weights=dict(draft.feature_weights),
                performance_metrics=draft.performance_metrics.model_dump(),
                trained_on_count=draft.trained_on_count,
                is_active=True,
            )
            self.session.add(model)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("Publish scoring model", e)

        await self.session.refresh(model)
        return self.to_record(model)

    async def activate_version(self, organization_id: uuid.UUID, model_version: int) -> Optional[ScoringModelRecord]:
        query = select(ScoringModel).where(
            ScoringModel.org_id == organization_id,
            ScoringModel.model_version == model_version
        )
        result = await self._exec(query, "Get scoring model")
        target = result.first()
        if not target:
            return None

        # Refuse to activate a version whose weights cannot be scored with
        self.to_record(target)

        try:
            await self._deactivate_current(organization_id)
            target.is_active = True
            self.session.add(target)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("Activate scoring model", e)

        await self.session.refresh(target)
        return self.to_record(target)


class ScoringHistoryRepository(BaseRepository[ScoringHistory]):
    """Feature vectors recorded at qualification time."""

    def __init__(self, session: AsyncSession):
        super().__init__(ScoringHistory, session)

    async def record(
        self,
        org_id: uuid.UUID,
        lead_id: uuid.UUID,
        features: FeatureVector,
        score: int,
        label: ScoreLabel,
        model_version: Optional[int] = None
    ) -> ScoringHistory:
        return await self.create({
            "org_id": org_id,
            "lead_id": lead_id,
            "score": score,
            "label": label.value,
            "model_version": model_version,
            "feature_vector": serialize_features(features),
        })

    async def get_for_lead(self, lead_id: uuid.UUID) -> List[ScoringHistory]:
        """Score history of a lead, newest first."""
        query = select(ScoringHistory).where(
            ScoringHistory.lead_id == lead_id
        ).order_by(ScoringHistory.created_at.desc())
        result = await self._exec(query, "List scoring history")
        return result.all()
