"""
Weighted scoring of feature vectors.
"""
import math
from typing import Any, Dict, Mapping, Optional

from lead_qualifier.schemas.features import FeatureVector, deserialize_features, feature_keys
from lead_qualifier.schemas.scoring import ScoreLabel, BreakdownItem
from lead_qualifier.scoring.weights import DEFAULT_FEATURE_WEIGHTS, weight_value

HOT_THRESHOLD = 80
WARM_THRESHOLD = 50
NEUTRAL_SCORE = 50


def calculate_weighted_score(
    features: FeatureVector,
    weights: Optional[Mapping[str, Any]] = None,
    include_behavioral: bool = True,
) -> int:
    """
    Weighted average of the features, scaled to an integer in [0, 100].

    Missing, negative or non-numeric weights count as zero. A zero total
    weight yields the neutral score of 50.
    """
    if isinstance(features, Mapping):
        features = deserialize_features(features)
    if weights is None:
        weights = DEFAULT_FEATURE_WEIGHTS

    weighted_sum = 0.0
    total_weight = 0.0
    for key in feature_keys(include_behavioral):
        weight = weight_value(weights, key)
        weighted_sum += getattr(features, key) * weight
        total_weight += weight

    if total_weight <= 0:
        return NEUTRAL_SCORE

    # Round half up, not to even
    score = math.floor((weighted_sum / total_weight) * 100 + 0.5)
    return int(min(100, max(0, score)))


def get_score_label(score: int) -> ScoreLabel:
    if score >= HOT_THRESHOLD:
        return ScoreLabel.HOT
    if score >= WARM_THRESHOLD:
        return ScoreLabel.WARM
    return ScoreLabel.COLD


def _tiered_note(value: float, strong: str, partial: str, weak: str, high: float = 0.8, mid: float = 0.5) -> str:
    if value >= high:
        return strong
    if value >= mid:
        return partial
    return weak


def build_breakdown(features: FeatureVector, enrichment: Any = None) -> Dict[str, BreakdownItem]:
    """Per-criterion view of the feature vector for the dashboard."""
    authority = getattr(enrichment, "authority", None)
    buying_role = getattr(authority, "buying_role", None)

    def item(value: float, note: str) -> BreakdownItem:
        return BreakdownItem(score=int(math.floor(value * 100 + 0.5)), note=note)

    return {
        "Company Size": item(
            features.company_size_match,
            _tiered_note(features.company_size_match, "Strong match", "Partial match", "Limited match"),
        ),
        "Industry": item(
            features.industry_match,
            _tiered_note(features.industry_match, "Target industry", "Related industry", "Outside target"),
        ),
        "Budget": item(
            features.budget_match,
            _tiered_note(features.budget_match, "Within ideal range", "Acceptable range", "Below target"),
        ),
        "Timeline": item(
            features.timeline_match,
            _tiered_note(features.timeline_match, "Ready to buy", "Active evaluation", "Long-term prospect"),
        ),
        "Job Title": item(
            features.job_title_match,
            _tiered_note(features.job_title_match, "Senior decision maker", "Mid-level stakeholder", "Individual contributor"),
        ),
        "Authority": item(
            features.authority_level,
            buying_role or _tiered_note(features.authority_level, "Decision maker", "Influencer", "End user"),
        ),
        "Buying Intent": item(
            features.buying_intent_score,
            _tiered_note(features.buying_intent_score, "High intent signals", "Moderate interest", "Early stage",
                         high=0.7, mid=0.4),
        ),
        "Engagement": item(
            features.behavioral_intent_score,
            _tiered_note(features.behavioral_intent_score, "Visited pricing or demo pages", "Browsing",
                         "Little on-site activity", high=0.7, mid=0.4),
        ),
    }


def build_reasoning(label: ScoreLabel, enrichment: Any = None) -> str:
    """Short narrative from enrichment summaries, or a generic one per label."""
    parts = []
    intent_summary = getattr(getattr(enrichment, "intent", None), "summary", None)
    company_summary = getattr(getattr(enrichment, "company", None), "summary", None)

    if intent_summary:
        parts.append(intent_summary)
    elif label == ScoreLabel.HOT:
        parts.append("Strong buying signals detected.")
    elif label == ScoreLabel.WARM:
        parts.append("Moderate interest with some gaps.")
    else:
        parts.append("Limited engagement indicators.")

    if company_summary:
        parts.append(company_summary)

    return " ".join(parts)


def recommend_action(label: ScoreLabel, features: FeatureVector) -> str:
    if label == ScoreLabel.HOT:
        if features.authority_level >= 0.7:
            return "Schedule a discovery call with this decision maker immediately"
        return "Request introduction to decision maker, then schedule call"
    if label == ScoreLabel.WARM:
        if features.buying_intent_score >= 0.6:
            return "Send personalized demo invitation to accelerate timeline"
        return "Nurture with relevant case studies and follow up in 2 weeks"
    if features.data_completeness < 0.5:
        return "Gather more information before further qualification"
    return "Add to automated nurture sequence"
