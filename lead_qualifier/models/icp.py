"""
ICP criterion model - one weighted rule of an organization's Ideal Customer Profile.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field

from lead_qualifier.models.columns import json_column, timestamp_column, utcnow


class ICPCriterion(SQLModel, table=True):
    __tablename__ = "icp_criterion"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(index=True)

    name: str
    type: str = Field(default="custom")  # company_size, industry, job_title, budget, timeline, custom
    description: Optional[str] = None

    weight: int = Field(default=10)  # percentage scale
    ideal_values: List[str] = Field(default_factory=list, sa_column=json_column(nullable=False))
    is_required: bool = Field(default=False)
    sort_order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
