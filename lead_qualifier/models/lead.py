"""
Lead model - a form submission to be qualified.
Holds the latest qualification result alongside the submitted fields.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from lead_qualifier.models.columns import json_column, timestamp_column, utcnow


class Lead(SQLModel, table=True):
    """
    Lead entity, scoped to an organization.
    """
    __tablename__ = "lead"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(index=True)

    # Contact
    email: str = Field(index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None

    # Company
    company_name: Optional[str] = Field(default=None, index=True)
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    industry: Optional[str] = None

    # Buying context
    budget_range: Optional[str] = None
    timeline: Optional[str] = None
    challenge: Optional[str] = None

    status: str = Field(default="new", index=True)  # new, contacted, converted, rejected, archived

    # Qualification result
    score: Optional[int] = Field(default=None, index=True)
    label: Optional[str] = None  # hot, warm, cold
    reasoning: Optional[str] = None
    breakdown: Optional[dict] = Field(default=None, sa_column=json_column(nullable=True))
    # Example: {"Budget": {"score": 100, "note": "Within ideal range"}}
    recommended_action: Optional[str] = None
    qualification_status: str = Field(default="pending")  # pending, qualified
    qualified_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
