"""
Activity log model - audit trail for qualification and model changes.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field

from lead_qualifier.models.columns import json_column, timestamp_column, utcnow


class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_log"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(index=True)
    actor_id: Optional[uuid.UUID] = Field(default=None, index=True)

    action: str = Field(index=True)
    entity_type: str = Field(index=True)  # lead, scoring_model, icp_criterion
    entity_id: Optional[uuid.UUID] = None

    description: Optional[str] = None
    meta_data: Dict[str, Any] = Field(default_factory=dict, sa_column=json_column(nullable=False))
    # Example: {"score": 84, "label": "hot", "model_version": 3}

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class Actions:
    LEAD_CREATED = "lead.created"
    LEAD_QUALIFIED = "lead.qualified"
    OUTCOME_RECORDED = "lead.outcome_recorded"
    MODEL_RETRAINED = "model.retrained"
    MODEL_ROLLED_BACK = "model.rolled_back"
    ICP_CRITERION_CREATED = "icp.criterion_created"
    ICP_CRITERION_DELETED = "icp.criterion_deleted"
