"""
Scoring models - versioned learned weights and the per-lead score history
they are trained from.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Index, UniqueConstraint, text

from lead_qualifier.models.columns import json_column, timestamp_column, utcnow


class ScoringModel(SQLModel, table=True):
    """
    One published weight set. Exactly one version per organization is
    active; older versions are kept for audit and rollback.
    """
    __tablename__ = "scoring_model"
    __table_args__ = (
        UniqueConstraint("org_id", "model_version"),
        # At most one active version per organization
        Index(
            "uq_scoring_model_active_org",
            "org_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(index=True)

    model_version: int
    feature_weights: dict = Field(default_factory=dict, sa_column=json_column(nullable=False))
    performance_metrics: Optional[dict] = Field(default=None, sa_column=json_column(nullable=True))
    trained_on_count: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class ScoringHistory(SQLModel, table=True):
    """
    Feature vector and score recorded each time a lead is qualified.
    """
    __tablename__ = "scoring_history"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(index=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)

    score: int
    label: str
    model_version: Optional[int] = None  # None when scored with default weights
    feature_vector: dict = Field(default_factory=dict, sa_column=json_column(nullable=False))

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column(index=True))
