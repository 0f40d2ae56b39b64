"""
SQL repositories against an in-memory SQLite database.
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from lead_qualifier.core.exceptions import CorruptModelError
from lead_qualifier.models.columns import utcnow
from lead_qualifier.models.outcome import LeadOutcome
from lead_qualifier.models.scoring import ScoringHistory, ScoringModel
from lead_qualifier.repositories.outcome_repo import OutcomeRepository
from lead_qualifier.repositories.scoring_repo import ScoringHistoryRepository, ScoringModelRepository
from lead_qualifier.schemas.features import FeatureVector
from lead_qualifier.schemas.outcome import OutcomeCreate, OutcomeType
from lead_qualifier.schemas.scoring import ModelDraft, ScoreLabel
from lead_qualifier.scoring.learner import validate_model
from lead_qualifier.scoring.weights import default_weights


def draft(trained_on_count: int = 50) -> ModelDraft:
    return ModelDraft(
        feature_weights=default_weights(),
        performance_metrics=validate_model(default_weights(), []),
        trained_on_count=trained_on_count,
    )


async def active_versions(session, org_id):
    result = await session.exec(
        select(ScoringModel).where(ScoringModel.org_id == org_id, ScoringModel.is_active == True)
    )
    return [m.model_version for m in result.all()]


class TestScoringModelRepository:

    async def test_no_model(self, session, org_id):
        assert await ScoringModelRepository(session).get_active_model(org_id) is None

    async def test_publish_keeps_one_active_model(self, session, org_id):
        repo = ScoringModelRepository(session)
        first = await repo.publish_model(org_id, draft())
        second = await repo.publish_model(org_id, draft(80))

        assert (first.model_version, second.model_version) == (1, 2)
        assert await active_versions(session, org_id) == [2]
        active = await repo.get_active_model(org_id)
        assert active.model_version == 2
        assert active.trained_on_count == 80
        assert active.performance_metrics is not None

    async def test_versions_are_per_organization(self, session, org_id):
        repo = ScoringModelRepository(session)
        await repo.publish_model(org_id, draft())
        other = await repo.publish_model(uuid.uuid4(), draft())
        assert other.model_version == 1
        assert await active_versions(session, org_id) == [1]

    async def test_list_models_newest_first(self, session, org_id):
        repo = ScoringModelRepository(session)
        for _ in range(3):
            await repo.publish_model(org_id, draft())
        assert [m.model_version for m in await repo.list_models(org_id)] == [3, 2, 1]

    async def test_activate_version(self, session, org_id):
        repo = ScoringModelRepository(session)
        await repo.publish_model(org_id, draft())
        await repo.publish_model(org_id, draft())

        restored = await repo.activate_version(org_id, 1)
        assert restored.model_version == 1
        assert restored.is_active is True
        assert await active_versions(session, org_id) == [1]
        assert await repo.activate_version(org_id, 9) is None
        assert await active_versions(session, org_id) == [1]

    async def test_corrupt_weights_raise(self, session, org_id):
        weights = default_weights()
        del weights["budget_match"]
        session.add(ScoringModel(org_id=org_id, model_version=1, feature_weights=weights))
        await session.commit()

        with pytest.raises(CorruptModelError):
            await ScoringModelRepository(session).get_active_model(org_id)

    async def test_non_numeric_weights_raise(self, session, org_id):
        weights = default_weights()
        weights["industry_match"] = "high"
        session.add(ScoringModel(org_id=org_id, model_version=1, feature_weights=weights))
        await session.commit()

        with pytest.raises(CorruptModelError):
            await ScoringModelRepository(session).get_active_model(org_id)

    async def test_second_active_row_is_rejected(self, session, org_id):
        session.add(ScoringModel(org_id=org_id, model_version=2, feature_weights=default_weights()))
        session.add(ScoringModel(org_id=org_id, model_version=3, feature_weights=default_weights()))
        with pytest.raises(IntegrityError):
            await session.commit()
        await session.rollback()

    async def test_inactive_versions_do_not_conflict(self, session, org_id):
        for version in (1, 2):
            session.add(ScoringModel(
                org_id=org_id, model_version=version, feature_weights=default_weights(), is_active=False
            ))
        session.add(ScoringModel(org_id=org_id, model_version=3, feature_weights=default_weights()))
        await session.commit()
        assert await active_versions(session, org_id) == [3]

    async def test_reactivating_active_version(self, session, org_id):
        repo = ScoringModelRepository(session)
        await repo.publish_model(org_id, draft())
        restored = await repo.activate_version(org_id, 1)
        assert restored.is_active is True
        assert await active_versions(session, org_id) == [1]

    async def test_timestamps_are_utc_aware(self, session_maker, org_id):
        async with session_maker() as session:
            await ScoringModelRepository(session).publish_model(org_id, draft())
        async with session_maker() as session:
            model = await ScoringModelRepository(session).get_active_model(org_id)
        assert model.created_at.tzinfo is not None
        assert model.created_at.utcoffset() == timedelta(0)


class TestOutcomeRepository:

    async def test_joins_latest_vector_before_outcome(self, session, org_id, lead_factory):
        lead = await lead_factory(org_id)
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session.add_all([
            ScoringHistory(org_id=org_id, lead_id=lead.id, score=40, label="cold", created_at=t0,
                           feature_vector=FeatureVector(budget_match=0.2).model_dump()),
            ScoringHistory(org_id=org_id, lead_id=lead.id, score=60, label="warm",
                           created_at=t0 + timedelta(days=1),
                           feature_vector=FeatureVector(budget_match=0.6).model_dump()),
            ScoringHistory(org_id=org_id, lead_id=lead.id, score=90, label="hot",
                           created_at=t0 + timedelta(days=5),
                           feature_vector=FeatureVector(budget_match=0.9).model_dump()),
            LeadOutcome(org_id=org_id, lead_id=lead.id, outcome_type="converted",
                        outcome_value=12000, days_to_outcome=3, created_at=t0 + timedelta(days=3)),
        ])
        await session.commit()

        examples = await OutcomeRepository(session).fetch_outcomes_with_features(org_id)

        assert len(examples) == 1
        assert examples[0].features.budget_match == 0.6
        assert examples[0].outcome == OutcomeType.CONVERTED
        assert examples[0].outcome_value == 12000
        assert examples[0].days_to_outcome == 3

    async def test_outcomes_without_prior_vector_are_skipped(self, session, org_id, lead_factory):
        scored = await lead_factory(org_id)
        unscored = await lead_factory(org_id, email="sam@beta.io")
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session.add_all([
            ScoringHistory(org_id=org_id, lead_id=scored.id, score=70, label="warm",
                           created_at=t0 + timedelta(days=2), feature_vector={}),
            LeadOutcome(org_id=org_id, lead_id=scored.id, outcome_type="rejected", created_at=t0),
            LeadOutcome(org_id=org_id, lead_id=unscored.id, outcome_type="rejected", created_at=t0),
        ])
        await session.commit()

        assert await OutcomeRepository(session).fetch_outcomes_with_features(org_id) == []

    async def test_counts_and_breakdown(self, session, org_id, lead_factory):
        lead = await lead_factory(org_id)
        repo = OutcomeRepository(session)
        before = utcnow() - timedelta(seconds=1)
        await repo.record(org_id, lead.id, OutcomeCreate(outcome_type=OutcomeType.CONVERTED), 4)
        await repo.record(org_id, lead.id, OutcomeCreate(outcome_type=OutcomeType.REJECTED), 6)
        await repo.record(org_id, lead.id, OutcomeCreate(outcome_type=OutcomeType.REJECTED), 7)

        assert await repo.count_outcomes(org_id) == 3
        assert await repo.count_outcomes_since(org_id, before) == 3
        assert await repo.count_outcomes_since(org_id, utcnow() + timedelta(hours=1)) == 0
        assert await repo.outcome_breakdown(org_id) == {"converted": 1, "rejected": 2}

        outcomes = await repo.list_for_lead(org_id, lead.id)
        assert [o.days_to_outcome for o in outcomes] == [7, 6, 4]


class TestScoringHistoryRepository:

    async def test_record_round_trips_features(self, session, org_id, lead_factory):
        lead = await lead_factory(org_id)
        repo = ScoringHistoryRepository(session)
        features = FeatureVector(job_title_match=1.0, recency_score=0.1)

        await repo.record(org_id, lead.id, features, 72, ScoreLabel.WARM, 3)
        history = await repo.get_for_lead(lead.id)

        assert len(history) == 1
        assert history[0].label == "warm"
        assert history[0].model_version == 3
        assert FeatureVector(**history[0].feature_vector) == features
