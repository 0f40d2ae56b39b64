"""
Shared fixtures: in-memory repository fakes for the trainer, and a SQLite
database for repository, service and API tests.
"""
import uuid
from typing import Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import lead_qualifier.models  # noqa: F401
from lead_qualifier.core.exceptions import PersistenceError
from lead_qualifier.database import get_session
from lead_qualifier.models.columns import utcnow
from lead_qualifier.main import app
from lead_qualifier.models.lead import Lead
from lead_qualifier.repositories.interfaces import ModelRepository, TrainingDataRepository
from lead_qualifier.schemas.outcome import TrainingExample
from lead_qualifier.schemas.scoring import ModelDraft, ScoringModelRecord


# =============================================================================
# IN-MEMORY FAKES
# =============================================================================

class InMemoryTrainingData(TrainingDataRepository):
    def __init__(self, examples: Optional[List[TrainingExample]] = None):
        self.examples = list(examples or [])
        self.fail = False

    async def fetch_outcomes_with_features(self, organization_id):
        if self.fail:
            raise PersistenceError("Load outcomes", "connection refused")
        return list(self.examples)

    async def count_outcomes(self, organization_id):
        return len(self.examples)

    async def count_outcomes_since(self, organization_id, since):
        return len(self.examples)

    async def outcome_breakdown(self, organization_id) -> Dict[str, int]:
        breakdown = {}
        for example in self.examples:
            breakdown[example.outcome.value] = breakdown.get(example.outcome.value, 0) + 1
        return breakdown


class InMemoryModelRepository(ModelRepository):
    def __init__(self):
        self.models: List[ScoringModelRecord] = []
        self.publish_calls = 0
        self.fail_publish = False

    async def get_active_model(self, organization_id):
        for model in self.models:
            if model.organization_id == organization_id and model.is_active:
                return model
        return None

    async def publish_model(self, organization_id, draft: ModelDraft):
        self.publish_calls += 1
        if self.fail_publish:
            raise PersistenceError("Publish scoring model", "disk full")
        versions = [m.model_version for m in self.models if m.organization_id == organization_id]
        for model in self.models:
            if model.organization_id == organization_id:
                model.is_active = False
        record = ScoringModelRecord(
            id=uuid.uuid4(),
            organization_id=organization_id,
            model_version=max(versions, default=0) + 1,
            feature_weights=draft.feature_weights,
            performance_metrics=draft.performance_metrics,
            trained_on_count=draft.trained_on_count,
            is_active=True,
            created_at=utcnow(),
        )
        self.models.append(record)
        return record

    async def list_models(self, organization_id):
        models = [m for m in self.models if m.organization_id == organization_id]
        return sorted(models, key=lambda m: m.model_version, reverse=True)

    async def activate_version(self, organization_id, model_version):
        target = None
        for model in self.models:
            if model.organization_id == organization_id:
                model.is_active = model.model_version == model_version
                if model.is_active:
                    target = model
        return target


@pytest.fixture
def org_id():
    return uuid.uuid4()


@pytest.fixture
def training_data():
    return InMemoryTrainingData()


@pytest.fixture
def model_repo():
    return InMemoryModelRepository()


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def lead_factory(session_maker):
    """Insert a lead in its own session and return it."""
    async def create(org_id: uuid.UUID, **fields) -> Lead:
        fields.setdefault("email", "dana@acme.io")
        async with session_maker() as session:
            lead = Lead(org_id=org_id, **fields)
            session.add(lead)
            await session.commit()
            await session.refresh(lead)
            return lead
    return create


@pytest.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
