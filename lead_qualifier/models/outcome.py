"""
Lead outcome model - append-only ground truth used for model training.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from lead_qualifier.models.columns import timestamp_column, utcnow


class LeadOutcome(SQLModel, table=True):
    __tablename__ = "lead_outcome"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(index=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)

    outcome_type: str = Field(index=True)  # converted, rejected, no_response, qualified_out, in_progress
    outcome_value: Optional[float] = None  # deal value
    days_to_outcome: Optional[int] = None
    notes: Optional[str] = None
    recorded_by: Optional[uuid.UUID] = None

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column(index=True))
