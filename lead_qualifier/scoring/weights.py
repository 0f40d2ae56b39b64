"""
Feature weight tables.

Default weights are used until an organization has a trained model.
Distribution: ICP alignment 35%, AI enrichment 25%, behavioral 30%,
data quality 10%.
"""
import math
from typing import Dict, Any, Mapping, Optional

from lead_qualifier.core.exceptions import CorruptModelError
from lead_qualifier.schemas.features import FEATURE_KEYS

FeatureWeights = Dict[str, float]


DEFAULT_FEATURE_WEIGHTS: Mapping[str, float] = {
    # ICP alignment (35%)
    "company_size_match": 0.08,
    "industry_match": 0.07,
    "budget_match": 0.10,
    "timeline_match": 0.05,
    "job_title_match": 0.05,
    # AI enrichment (25%)
    "buying_intent_score": 0.08,
    "authority_level": 0.07,
    "company_health_score": 0.05,
    "urgency_indicators": 0.05,
    # Behavioral (30%)
    "engagement_score": 0.08,
    "behavioral_intent_score": 0.12,  # pricing/demo views are the strongest buying signal
    "recency_score": 0.05,
    "frequency_score": 0.03,
    "channel_quality_score": 0.02,
    # Data quality (10%)
    "data_completeness": 0.05,
    "contact_quality": 0.05,
}

MIN_WEIGHT = 0.01
MAX_WEIGHT = 0.5


def default_weights() -> FeatureWeights:
    """A fresh, mutable copy of the default weight table."""
    return dict(DEFAULT_FEATURE_WEIGHTS)


def weight_value(weights: Mapping[str, Any], key: str) -> float:
    """Weight for a feature; missing, negative or non-numeric weights count as zero."""
    value = weights.get(key) if weights else None
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def normalize_weights(weights: Mapping[str, Any]) -> FeatureWeights:
    """Scale weights so they sum to 1.0. A zero total yields the default table."""
    cleaned = {key: weight_value(weights, key) for key in FEATURE_KEYS}
    total = sum(cleaned.values())
    if total <= 0:
        return default_weights()
    return {key: value / total for key, value in cleaned.items()}


def load_weights(data: Optional[Mapping[str, Any]], model_version: Optional[int] = None) -> FeatureWeights:
    """
    Validate a stored weight map.
    Raises CorruptModelError instead of scoring with a partial weight set.
    """
    if not isinstance(data, Mapping):
        raise CorruptModelError(model_version, "feature weights are not a mapping")

    missing = [key for key in FEATURE_KEYS if key not in data]
    if missing:
        raise CorruptModelError(model_version, f"missing weights for {', '.join(missing)}")

    weights = {}
    for key in FEATURE_KEYS:
        raw = data[key]
        if isinstance(raw, bool):
            raise CorruptModelError(model_version, f"weight for {key} is not numeric")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise CorruptModelError(model_version, f"weight for {key} is not numeric")
        if math.isnan(value) or value < 0:
            raise CorruptModelError(model_version, f"weight for {key} is out of range")
        weights[key] = value

    if sum(weights.values()) <= 0:
        raise CorruptModelError(model_version, "feature weights sum to zero")
    return weights
