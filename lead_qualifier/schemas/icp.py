"""
ICP criterion schemas.
"""
import uuid
from enum import Enum
from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field


class CriterionType(str, Enum):
    COMPANY_SIZE = "company_size"
    INDUSTRY = "industry"
    JOB_TITLE = "job_title"
    BUDGET = "budget"
    TIMELINE = "timeline"
    CUSTOM = "custom"


class ICPCriterionData(BaseModel):
    """One weighted criterion of an organization's Ideal Customer Profile."""
    name: str = Field(min_length=1)
    type: CriterionType = CriterionType.CUSTOM
    description: Optional[str] = None
    weight: int = Field(default=10, ge=0, le=100)  # percentage scale
    ideal_values: List[str] = []
    is_required: bool = False
    sort_order: int = 0

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Company Size",
                "type": "company_size",
                "weight": 8,
                "ideal_values": ["51-200 employees", "201-500 employees", "500+ employees"],
                "is_required": False
            }
        }


class ICPCriterionResponse(ICPCriterionData):
    """Stored criterion."""
    id: uuid.UUID
    org_id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
