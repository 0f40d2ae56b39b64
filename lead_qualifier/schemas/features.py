"""
Feature vector schema.
Normalized numeric encoding of a lead's fit, intent and data quality signals.
"""
import math
from typing import Dict, Any, Mapping, Tuple, Optional

from pydantic import BaseModel, Field


NEUTRAL = 0.5


class FeatureVector(BaseModel):
    """
    Fixed-schema feature vector consumed by the scorer.
    Every field is in [0, 1]; absent signals sit at the neutral 0.5.
    """
    # ICP alignment (criteria matching)
    company_size_match: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    industry_match: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    budget_match: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    timeline_match: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    job_title_match: float = Field(default=NEUTRAL, ge=0.0, le=1.0)

    # AI enrichment
    buying_intent_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    authority_level: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    company_health_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    urgency_indicators: float = Field(default=NEUTRAL, ge=0.0, le=1.0)

    # Behavioral (pixel/tracking data)
    engagement_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    behavioral_intent_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    recency_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    frequency_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    channel_quality_score: float = Field(default=NEUTRAL, ge=0.0, le=1.0)

    # Data quality
    data_completeness: float = Field(default=NEUTRAL, ge=0.0, le=1.0)
    contact_quality: float = Field(default=NEUTRAL, ge=0.0, le=1.0)

    class Config:
        frozen = True


ICP_FEATURES: Tuple[str, ...] = (
    "company_size_match",
    "industry_match",
    "budget_match",
    "timeline_match",
    "job_title_match",
)
ENRICHMENT_FEATURES: Tuple[str, ...] = (
    "buying_intent_score",
    "authority_level",
    "company_health_score",
    "urgency_indicators",
)
BEHAVIORAL_FEATURES: Tuple[str, ...] = (
    "engagement_score",
    "behavioral_intent_score",
    "recency_score",
    "frequency_score",
    "channel_quality_score",
)
QUALITY_FEATURES: Tuple[str, ...] = (
    "data_completeness",
    "contact_quality",
)

FEATURE_KEYS: Tuple[str, ...] = tuple(FeatureVector.model_fields)


def feature_keys(include_behavioral: bool = True) -> Tuple[str, ...]:
    """Feature keys in schema order, optionally without the behavioral group."""
    if include_behavioral:
        return FEATURE_KEYS
    return tuple(k for k in FEATURE_KEYS if k not in BEHAVIORAL_FEATURES)


def coerce_unit(value: Any, default: Optional[float] = NEUTRAL) -> Optional[float]:
    """Convert a stored value to a float in [0, 1], or the default if unusable."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return min(1.0, max(0.0, number))


def serialize_features(features: FeatureVector) -> Dict[str, float]:
    """Serialize a feature vector for storage."""
    return features.model_dump()


def deserialize_features(data: Optional[Dict[str, Any]]) -> FeatureVector:
    """
    Rebuild a feature vector from storage.
    Missing or unreadable fields fall back to the neutral 0.5.
    """
    if not isinstance(data, Mapping):
        data = {}
    return FeatureVector(**{key: coerce_unit(data.get(key)) for key in FEATURE_KEYS})
