"""
Contextual signal models: AI enrichment results, on-site behavior and ad attribution.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from lead_qualifier.models.columns import json_column, timestamp_column, utcnow


class EnrichmentType:
    COMPANY_RESEARCH = "company_research"
    INTENT_ANALYSIS = "intent_analysis"
    AUTHORITY_ASSESSMENT = "authority_assessment"


class LeadEnrichment(SQLModel, table=True):
    __tablename__ = "lead_enrichment"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)

    enrichment_type: str = Field(index=True)
    data: dict = Field(default_factory=dict, sa_column=json_column(nullable=False))
    confidence: Optional[float] = None
    source: Optional[str] = None  # provider name

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class BehavioralScore(SQLModel, table=True):
    """
    Per-lead aggregate of tracked page views and interactions.
    """
    __tablename__ = "behavioral_score"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True, unique=True)

    total_page_views: int = Field(default=0)
    unique_pages_viewed: int = Field(default=0)
    total_time_on_site: int = Field(default=0)  # seconds
    pricing_page_views: int = Field(default=0)
    demo_page_views: int = Field(default=0)
    case_study_views: int = Field(default=0)
    feature_page_views: int = Field(default=0)
    forms_started: int = Field(default=0)
    forms_completed: int = Field(default=0)
    cta_clicks: int = Field(default=0)
    days_since_first_visit: Optional[int] = None
    days_since_last_visit: Optional[int] = None
    visit_frequency: Optional[float] = None

    # 0-100
    engagement_score: Optional[float] = None
    intent_score: Optional[float] = None
    recency_score: Optional[float] = None
    frequency_score: Optional[float] = None
    behavioral_score: Optional[float] = None

    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class LeadTracking(SQLModel, table=True):
    """
    UTM parameters and ad click ids captured with the submission.
    """
    __tablename__ = "lead_tracking"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)

    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    gclid: Optional[str] = None
    fbclid: Optional[str] = None
    ttclid: Optional[str] = None
    landing_page: Optional[str] = None
    referrer: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
