"""
Feature extraction.

Converts a lead, the organization's ICP criteria and optional enrichment,
behavioral and tracking signals into a normalized FeatureVector.

Extraction never raises: every input may be a pydantic schema, a SQLModel
row or a plain dict, and any absent or malformed value degrades to a
documented neutral default.
"""
import math
import re
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from lead_qualifier.schemas.features import FeatureVector, NEUTRAL


# Lookup aliases per feature, tried after matching on criterion type
CRITERION_ALIASES = {
    "company_size": ("company_size", "size", "employees"),
    "industry": ("industry", "vertical", "sector"),
    "budget": ("budget", "budget_range", "price"),
    "timeline": ("timeline", "timeframe", "urgency"),
    "job_title": ("job_title", "title", "role", "position"),
}

BUDGET_KEYWORD_TIERS = (
    (0.9, ("enterprise", "100k+", "50k+", "unlimited", "flexible")),
    (0.7, ("10k", "25k", "growth", "standard")),
    (0.4, ("startup", "small", "limited", "under 5k", "minimal")),
)

TIMELINE_KEYWORD_TIERS = (
    (1.0, ("immediately", "asap", "urgent", "this week", "next week", "1 week", "today")),
    (0.85, ("this month", "1 month", "30 days", "next month", "2-4 weeks")),
    (0.65, ("this quarter", "3 months", "90 days", "2-3 months", "1-3 months", "q1", "q2", "q3", "q4")),
    (0.35, ("6 months", "6+ months", "next year", "evaluating", "researching", "not sure", "eventually")),
)

# Seniority ladder, most senior first; patterns match on word boundaries
TITLE_SENIORITY_TIERS = (
    (1.0, (r"ceo", r"cto", r"cfo", r"coo", r"cmo", r"cio", r"chief", r"c-level",
           r"(?<!vice[\s-])president", r"owner", r"founder", r"co-founder", r"partner")),
    (0.9, (r"vp", r"vice president", r"vice-president", r"svp", r"evp", r"head of")),
    (0.8, (r"director",)),
    (0.65, (r"manager", r"lead", r"senior", r"principal")),
    (0.35, (r"analyst", r"associate", r"coordinator", r"specialist", r"assistant", r"intern")),
)
_TITLE_TIER_PATTERNS = [
    (score, re.compile(r"\b(?:" + "|".join(patterns) + r")\b"))
    for score, patterns in TITLE_SENIORITY_TIERS
]

COMPLETENESS_WEIGHTS = (
    ("email", 0.15),
    ("first_name", 0.10),
    ("last_name", 0.10),
    ("phone", 0.10),
    ("job_title", 0.15),
    ("company_name", 0.15),
    ("company_website", 0.05),
    ("company_size", 0.05),
    ("industry", 0.05),
    ("budget_range", 0.05),
    ("timeline", 0.03),
    ("challenge", 0.02),
)

PERSONAL_EMAIL_DOMAINS = frozenset({
    "gmail.com", "googlemail.com", "yahoo.com", "hotmail.com", "outlook.com",
    "live.com", "msn.com", "aol.com", "icloud.com", "me.com", "protonmail.com",
})

_NUMBER_PATTERN = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(?:([kKmM])(?![a-zA-Z]))?")
_RANGE_SEPARATOR = re.compile(r"\s*(?:-|–|\bto\b)\s*")


def extract_features(
    lead: Any,
    criteria: Optional[Iterable[Any]] = None,
    enrichment: Any = None,
    behavioral: Any = None,
    tracking: Any = None,
) -> FeatureVector:
    """Build the feature vector for one qualification event."""
    criteria = _as_list(criteria)

    company = _get(enrichment, "company")
    intent = _get(enrichment, "intent")
    authority = _get(enrichment, "authority")

    health = _number(_get(company, "health_score"))

    return FeatureVector(
        # ICP alignment
        company_size_match=criterion_match(
            _text(_get(lead, "company_size")), find_criterion(criteria, "company_size")
        ),
        industry_match=criterion_match(
            _text(_get(lead, "industry")), find_criterion(criteria, "industry")
        ),
        budget_match=budget_match(
            _text(_get(lead, "budget_range")), find_criterion(criteria, "budget")
        ),
        timeline_match=timeline_match(
            _text(_get(lead, "timeline")), find_criterion(criteria, "timeline")
        ),
        job_title_match=title_match(
            _text(_get(lead, "job_title")), find_criterion(criteria, "job_title")
        ),
        # AI enrichment; company health arrives on a 1-10 scale
        buying_intent_score=normalize_score(_get(intent, "buying_intent_score")),
        authority_level=normalize_score(_get(authority, "authority_level")),
        company_health_score=normalize_score(health / 10 if health is not None else None),
        urgency_indicators=normalize_score(_get(intent, "urgency_score")),
        # Behavioral
        engagement_score=normalize_score(_get(behavioral, "engagement_score")),
        behavioral_intent_score=behavioral_intent(behavioral),
        recency_score=normalize_score(_get(behavioral, "recency_score")),
        frequency_score=normalize_score(_get(behavioral, "frequency_score")),
        channel_quality_score=channel_quality(tracking),
        # Data quality
        data_completeness=data_completeness(lead),
        contact_quality=contact_quality(lead),
    )


# ---------------------------------------------------------------------------
# ICP alignment
# ---------------------------------------------------------------------------

def find_criterion(criteria: Sequence[Any], feature: str) -> Any:
    """Locate the criterion for a feature by type, then by name alias."""
    for criterion in criteria:
        if _enum_value(_get(criterion, "type")) == feature:
            return criterion

    aliases = CRITERION_ALIASES.get(feature, (feature,))
    by_name = {}
    for criterion in criteria:
        key = _criterion_key(_get(criterion, "name"))
        if key and key not in by_name:
            by_name[key] = criterion
    for alias in aliases:
        if alias in by_name:
            return by_name[alias]
    return None


def criterion_match(value: Optional[str], criterion: Any) -> float:
    """Exact, partial or no match of a lead value against a criterion's ideal values."""
    if not value:
        return NEUTRAL

    ideal_values = _ideal_values(criterion)
    if not ideal_values:
        # Data present, no stated preference
        return 0.6

    normalized = value.lower().strip()
    ideals = [ideal.lower().strip() for ideal in ideal_values]

    if normalized in ideals:
        return 1.0
    for ideal in ideals:
        if ideal and (normalized in ideal or ideal in normalized):
            return 0.8
    return 0.3


def budget_match(budget: Optional[str], criterion: Any) -> float:
    """Budget fit: numeric ratio against ideal values, then keyword tiers."""
    if not budget:
        return 0.4

    ideal_values = _ideal_values(criterion)
    if not ideal_values:
        return 0.6

    budget_amount = extract_amount(budget)
    if budget_amount is not None:
        best = None
        for ideal in ideal_values:
            bounds = extract_range(ideal)
            if bounds is not None:
                low, high = bounds
                if low <= budget_amount <= high:
                    return 1.0
                ideal_amount = low if budget_amount < low else high
            else:
                ideal_amount = extract_amount(ideal)
            if not ideal_amount:
                continue
            # "$100,000+" is a floor, met by any budget at or above it
            if ideal.strip().endswith("+") and budget_amount >= ideal_amount:
                return 1.0
            ratio = budget_amount / ideal_amount
            if 0.5 <= ratio <= 2.0:
                score = max(0.6, 1 - abs(1 - ratio) * 0.5)
                best = score if best is None else max(best, score)
        if best is not None:
            return best

    budget_lower = budget.lower()
    for score, keywords in BUDGET_KEYWORD_TIERS:
        if any(keyword in budget_lower for keyword in keywords):
            return score

    return criterion_match(budget, criterion)


def timeline_match(timeline: Optional[str], criterion: Any) -> float:
    """Urgency tier of the stated timeline."""
    if not timeline:
        return 0.4

    timeline_lower = timeline.lower()
    for score, keywords in TIMELINE_KEYWORD_TIERS:
        if any(keyword in timeline_lower for keyword in keywords):
            return score

    return criterion_match(timeline, criterion)


def title_match(title: Optional[str], criterion: Any) -> float:
    """Seniority of the job title; unknown titles fall back to the criterion."""
    if not title:
        return 0.4

    title_lower = title.lower()
    for score, pattern in _TITLE_TIER_PATTERNS:
        if pattern.search(title_lower):
            return score

    return criterion_match(title, criterion)


def extract_amount(text: Optional[str]) -> Optional[float]:
    """
    First monetary amount in a string.
    "$10,000" -> 10000, "25k" -> 25000, "$1.5M+" -> 1500000.
    """
    if not text:
        return None
    match = _NUMBER_PATTERN.search(text)
    if not match:
        return None
    try:
        amount = float(match.group(1).replace(",", ""))
    except ValueError:
        return None
    suffix = (match.group(2) or "").lower()
    if suffix == "k":
        amount *= 1_000
    elif suffix == "m":
        amount *= 1_000_000
    return amount


def extract_range(text: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    Both ends of an amount range, low first.
    "$50k-$100k" -> (50000, 100000); "50-100k" -> (50000, 100000).
    """
    if not text:
        return None
    parts = _RANGE_SEPARATOR.split(text.strip())
    if len(parts) != 2:
        return None
    low_match = _NUMBER_PATTERN.search(parts[0])
    high_match = _NUMBER_PATTERN.search(parts[1])
    if not low_match or not high_match:
        return None
    low_text = parts[0]
    # A single suffix covers both ends: "50-100k"
    if high_match.group(2) and not low_match.group(2):
        low_text = low_match.group(1) + high_match.group(2)
    low, high = extract_amount(low_text), extract_amount(parts[1])
    if low is None or high is None:
        return None
    return (low, high) if low <= high else (high, low)


# ---------------------------------------------------------------------------
# Enrichment and behavioral signals
# ---------------------------------------------------------------------------

def normalize_score(value: Any, default: float = NEUTRAL) -> float:
    """Map a 0-1 or 0-100 score into [0, 1]."""
    number = _number(value)
    if number is None:
        return default
    if number > 1:
        number = number / 100
    return min(1.0, max(0.0, number))


def behavioral_intent(behavioral: Any) -> float:
    """Intent from high-value page views, unless a pre-aggregated score exists."""
    if behavioral is None:
        return NEUTRAL

    aggregated = _number(_get(behavioral, "intent_score"))
    if aggregated is not None:
        return normalize_score(aggregated)

    score = 0.3
    score += min(0.3, _count(_get(behavioral, "pricing_page_views")) * 0.15)
    score += min(0.2, _count(_get(behavioral, "demo_page_views")) * 0.1)
    score += min(0.1, _count(_get(behavioral, "case_study_views")) * 0.05)
    score += min(0.1, _count(_get(behavioral, "cta_clicks")) * 0.05)
    if _count(_get(behavioral, "forms_completed")) > 0:
        score += 0.1
    return min(1.0, max(0.0, score))


def channel_quality(tracking: Any) -> float:
    """Acquisition channel quality from click ids and UTM parameters."""
    if tracking is None:
        return NEUTRAL

    if _text(_get(tracking, "gclid")):
        return 0.8
    if _text(_get(tracking, "fbclid")):
        return 0.7
    if _text(_get(tracking, "ttclid")):
        return 0.65

    source = (_text(_get(tracking, "utm_source")) or "").lower()
    medium = (_text(_get(tracking, "utm_medium")) or "").lower()

    if medium in ("cpc", "ppc", "paid"):
        return 0.8 if source in ("google", "bing") else 0.7
    if medium == "organic" or source in ("google", "bing"):
        return 0.65
    if medium == "referral":
        return 0.6
    if medium == "social":
        return 0.55
    if medium == "email":
        return 0.7
    if source in ("direct", "(direct)"):
        return 0.55
    return NEUTRAL


# ---------------------------------------------------------------------------
# Data quality
# ---------------------------------------------------------------------------

def data_completeness(lead: Any) -> float:
    completeness = sum(
        weight for field, weight in COMPLETENESS_WEIGHTS if _text(_get(lead, field))
    )
    return min(1.0, completeness)


def contact_quality(lead: Any) -> float:
    score = 0.5

    email = _text(_get(lead, "email"))
    if email:
        domain = email.lower().rsplit("@", 1)[-1]
        score += 0.1 if domain in PERSONAL_EMAIL_DOMAINS else 0.25

    if _text(_get(lead, "phone")):
        score += 0.15
    if _text(_get(lead, "company_website")):
        score += 0.1

    return min(1.0, score)


# ---------------------------------------------------------------------------
# Input access helpers
# ---------------------------------------------------------------------------

def _get(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def _as_list(items: Any) -> List[Any]:
    if items is None or isinstance(items, (str, bytes, dict)):
        return []
    try:
        return [item for item in items if item is not None]
    except TypeError:
        return []


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    return text or None


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _count(value: Any) -> float:
    number = _number(value)
    return number if number and number > 0 else 0.0


def _enum_value(value: Any) -> Optional[str]:
    if isinstance(value, Enum):
        value = value.value
    return value.lower() if isinstance(value, str) else None


def _criterion_key(name: Any) -> Optional[str]:
    if not isinstance(name, str):
        return None
    return re.sub(r"[^a-z_]", "_", name.lower().strip())


def _ideal_values(criterion: Any) -> List[str]:
    values = _get(criterion, "ideal_values")
    if not values or isinstance(values, (str, bytes, dict)):
        return []
    try:
        return [text for text in (_text(v) for v in values) if text]
    except TypeError:
        return []
