"""
Outcome schemas.
"""
import uuid
from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field

from lead_qualifier.schemas.features import FeatureVector


class OutcomeType(str, Enum):
    CONVERTED = "converted"
    REJECTED = "rejected"
    NO_RESPONSE = "no_response"
    QUALIFIED_OUT = "qualified_out"
    IN_PROGRESS = "in_progress"


# Lead status that follows from each recorded outcome
OUTCOME_LEAD_STATUS = {
    OutcomeType.CONVERTED: "converted",
    OutcomeType.REJECTED: "rejected",
    OutcomeType.NO_RESPONSE: "archived",
    OutcomeType.QUALIFIED_OUT: "rejected",
    OutcomeType.IN_PROGRESS: "contacted",
}


class OutcomeCreate(BaseModel):
    """Record the ground-truth result of pursuing a lead."""
    outcome_type: OutcomeType
    outcome_value: Optional[float] = None  # deal value, for converted leads
    days_to_outcome: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "outcome_type": "converted",
                "outcome_value": 42000,
                "notes": "Signed annual plan"
            }
        }


class OutcomeResponse(BaseModel):
    """Outcome response."""
    id: uuid.UUID
    lead_id: uuid.UUID
    outcome_type: OutcomeType
    outcome_value: Optional[float]
    days_to_outcome: Optional[int]
    notes: Optional[str]
    recorded_by: Optional[uuid.UUID]
    created_at: datetime

    class Config:
        from_attributes = True


class OutcomeRecordedResponse(BaseModel):
    """Result of recording an outcome."""
    success: bool = True
    outcome: OutcomeResponse
    retraining_recommended: bool
    retraining_triggered: bool = False


class TrainingExample(BaseModel):
    """One scored feature vector paired with its recorded outcome."""
    features: FeatureVector
    outcome: OutcomeType
    outcome_value: Optional[float] = None
    days_to_outcome: Optional[int] = None
