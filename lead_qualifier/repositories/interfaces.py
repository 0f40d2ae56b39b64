"""
Storage contracts used by the model trainer and training service.

The trainer only depends on these abstractions, so it can run against the
SQL repositories in production and against in-memory fakes in tests.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from lead_qualifier.schemas.outcome import TrainingExample
from lead_qualifier.schemas.scoring import ModelDraft, ScoringModelRecord


class TrainingDataRepository(ABC):
    """Read access to outcomes joined with the features they were scored on."""

    @abstractmethod
    async def fetch_outcomes_with_features(self, organization_id: uuid.UUID) -> List[TrainingExample]:
        """
        Each outcome paired with the most recent scoring-history vector for
        the same lead recorded at or before the outcome. Outcomes with no
        such vector are skipped.
        """

    @abstractmethod
    async def count_outcomes(self, organization_id: uuid.UUID) -> int:
        ...

    @abstractmethod
    async def count_outcomes_since(self, organization_id: uuid.UUID, since: datetime) -> int:
        ...

    @abstractmethod
    async def outcome_breakdown(self, organization_id: uuid.UUID) -> Dict[str, int]:
        """Number of outcomes per outcome type."""


class ModelRepository(ABC):
    """Versioned scoring models, at most one active per organization."""

    @abstractmethod
    async def get_active_model(self, organization_id: uuid.UUID) -> Optional[ScoringModelRecord]:
        """
        The active model, or None. Raises CorruptModelError when the stored
        weights cannot be used.
        """

    @abstractmethod
    async def publish_model(self, organization_id: uuid.UUID, draft: ModelDraft) -> ScoringModelRecord:
        """
        Deactivate the current model and insert the draft as the next
        version, atomically.
        """

    @abstractmethod
    async def list_models(self, organization_id: uuid.UUID) -> List[ScoringModelRecord]:
        """All versions, newest first."""

    @abstractmethod
    async def activate_version(self, organization_id: uuid.UUID, model_version: int) -> Optional[ScoringModelRecord]:
        """Make a retained version the active one. None if it does not exist."""
