"""
Scoring schemas.
"""
import uuid
from enum import Enum
from typing import Optional, Dict, List
from datetime import datetime
from pydantic import BaseModel


class ScoreLabel(str, Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class BreakdownItem(BaseModel):
    """Per-criterion score with a short explanation."""
    score: int
    note: str


class QualificationResult(BaseModel):
    """Outcome of qualifying one lead."""
    score: int
    label: ScoreLabel
    reasoning: str
    breakdown: Dict[str, BreakdownItem]
    recommended_action: str
    model_version: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "score": 84,
                "label": "hot",
                "reasoning": "Strong buying signals detected.",
                "breakdown": {"Budget": {"score": 100, "note": "Within ideal range"}},
                "recommended_action": "Schedule a discovery call with this decision maker immediately",
                "model_version": 3
            }
        }


class ConfusionMatrix(BaseModel):
    true_positives: int = 0
    false_positives: int = 0
    true_negatives: int = 0
    false_negatives: int = 0


class ModelMetrics(BaseModel):
    """Validation metrics computed on the held-out split."""
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    auc: float
    confusion_matrix: ConfusionMatrix
    feature_importance: Dict[str, float]


class ScoringModelRecord(BaseModel):
    """A published weight set for one organization."""
    id: Optional[uuid.UUID] = None
    organization_id: uuid.UUID
    model_version: int
    feature_weights: Dict[str, float]
    performance_metrics: Optional[ModelMetrics] = None
    trained_on_count: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ModelDraft(BaseModel):
    """A trained weight set that has not been published yet."""
    feature_weights: Dict[str, float]
    performance_metrics: ModelMetrics
    trained_on_count: int


class TrainingFailureReason(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    ACCURACY_REGRESSION = "accuracy_regression"
    PERSISTENCE_ERROR = "persistence_error"


class TrainingResult(BaseModel):
    """Discriminated result of a training run."""
    success: bool
    model: Optional[ScoringModelRecord] = None
    error: Optional[str] = None
    reason: Optional[TrainingFailureReason] = None
    metrics: Optional[ModelMetrics] = None
    examples_count: int = 0


class ModelStats(BaseModel):
    """Model status for the dashboard."""
    current_model: Optional[ScoringModelRecord]
    total_outcomes: int
    outcome_breakdown: Dict[str, int]
    retraining_recommended: bool


class ModelHistoryResponse(BaseModel):
    items: List[ScoringModelRecord]
    total: int
