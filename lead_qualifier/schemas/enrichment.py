"""
Contextual signal schemas: AI enrichment, behavioral aggregates, ad tracking.
All fields are optional; the extractor falls back to neutral values.
"""
from typing import Optional, List

from pydantic import BaseModel


class CompanyResearch(BaseModel):
    """Company research enrichment."""
    company_size_estimate: Optional[str] = None
    technology_indicators: List[str] = []
    growth_signals: List[str] = []
    pain_points: List[str] = []
    health_score: Optional[float] = None  # 1-10
    confidence: Optional[float] = None  # 0-1
    summary: Optional[str] = None


class IntentAnalysis(BaseModel):
    """Buying-intent enrichment."""
    problem_awareness: Optional[float] = None  # 1-5
    solution_awareness: Optional[float] = None  # 1-5
    urgency_indicators: List[str] = []
    buying_intent_score: Optional[float] = None  # 1-100
    urgency_score: Optional[float] = None  # 0-1
    summary: Optional[str] = None


class AuthorityAssessment(BaseModel):
    """Decision-making authority enrichment."""
    decision_maker_likelihood: Optional[float] = None  # 0-1
    title_seniority: Optional[str] = None
    buying_role: Optional[str] = None
    authority_level: Optional[float] = None  # 0-1


class EnrichmentData(BaseModel):
    """Latest enrichment results for a lead, grouped by type."""
    company: Optional[CompanyResearch] = None
    intent: Optional[IntentAnalysis] = None
    authority: Optional[AuthorityAssessment] = None

    @property
    def is_empty(self) -> bool:
        return self.company is None and self.intent is None and self.authority is None


class BehavioralScores(BaseModel):
    """Per-lead behavioral aggregate from the tracking pixel."""
    total_page_views: Optional[int] = None
    unique_pages_viewed: Optional[int] = None
    total_time_on_site: Optional[int] = None  # seconds
    pricing_page_views: Optional[int] = None
    demo_page_views: Optional[int] = None
    case_study_views: Optional[int] = None
    feature_page_views: Optional[int] = None
    forms_started: Optional[int] = None
    forms_completed: Optional[int] = None
    cta_clicks: Optional[int] = None
    days_since_first_visit: Optional[int] = None
    days_since_last_visit: Optional[int] = None
    visit_frequency: Optional[float] = None  # visits per week
    # Pre-computed scores, 0-100 or 0-1
    engagement_score: Optional[float] = None
    intent_score: Optional[float] = None
    recency_score: Optional[float] = None
    frequency_score: Optional[float] = None
    behavioral_score: Optional[float] = None


class TrackingParams(BaseModel):
    """Ad-click and UTM attribution captured with the submission."""
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    gclid: Optional[str] = None
    fbclid: Optional[str] = None
    ttclid: Optional[str] = None
