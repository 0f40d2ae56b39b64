"""
Weighted scoring, labels and the qualification narrative.
"""
import pytest

from lead_qualifier.schemas.enrichment import (
    AuthorityAssessment, BehavioralScores, CompanyResearch, EnrichmentData, IntentAnalysis, TrackingParams
)
from lead_qualifier.schemas.features import FEATURE_KEYS, FeatureVector
from lead_qualifier.schemas.icp import CriterionType, ICPCriterionData
from lead_qualifier.schemas.lead import LeadData
from lead_qualifier.schemas.scoring import ScoreLabel
from lead_qualifier.scoring.scorer import (
    build_breakdown, build_reasoning, calculate_weighted_score, get_score_label, recommend_action
)
from lead_qualifier.scoring.weights import DEFAULT_FEATURE_WEIGHTS, normalize_weights
from lead_qualifier.services.qualification_service import qualify


def uniform(value: float) -> FeatureVector:
    return FeatureVector(**{key: value for key in FEATURE_KEYS})


class TestWeightedScore:

    def test_bounds(self):
        assert calculate_weighted_score(uniform(1.0)) == 100
        assert calculate_weighted_score(uniform(0.0)) == 0
        assert calculate_weighted_score(uniform(0.5)) == 50

    def test_default_weights_sum_to_one(self):
        assert sum(DEFAULT_FEATURE_WEIGHTS.values()) == pytest.approx(1.0)

    def test_zero_weights_yield_neutral_score(self):
        assert calculate_weighted_score(uniform(1.0), {key: 0 for key in FEATURE_KEYS}) == 50
        assert calculate_weighted_score(uniform(1.0), {}) == 50

    def test_missing_and_invalid_weights_count_as_zero(self):
        features = FeatureVector(budget_match=1.0, industry_match=0.0)
        weights = {"budget_match": 1.0, "industry_match": "heavy", "timeline_match": -4}
        assert calculate_weighted_score(features, weights) == 100

    def test_weights_need_not_be_normalized(self):
        features = FeatureVector(budget_match=1.0, industry_match=0.0)
        assert calculate_weighted_score(features, {"budget_match": 3, "industry_match": 1}) == 75

    def test_behavioral_group_can_be_excluded(self):
        features = FeatureVector(**{
            **{key: 1.0 for key in FEATURE_KEYS},
            "engagement_score": 0.0,
            "behavioral_intent_score": 0.0,
            "recency_score": 0.0,
            "frequency_score": 0.0,
            "channel_quality_score": 0.0,
        })
        assert calculate_weighted_score(features, include_behavioral=False) == 100
        assert calculate_weighted_score(features) == 70

    def test_accepts_stored_feature_map(self):
        assert calculate_weighted_score({"budget_match": 1.0}, {"budget_match": 1.0}) == 100

    def test_normalize_weights(self):
        weights = normalize_weights({key: 2.0 for key in FEATURE_KEYS})
        assert sum(weights.values()) == pytest.approx(1.0)
        assert normalize_weights({}) == dict(DEFAULT_FEATURE_WEIGHTS)


class TestLabels:

    @pytest.mark.parametrize("score,label", [
        (100, ScoreLabel.HOT),
        (80, ScoreLabel.HOT),
        (79, ScoreLabel.WARM),
        (50, ScoreLabel.WARM),
        (49, ScoreLabel.COLD),
        (0, ScoreLabel.COLD),
    ])
    def test_thresholds(self, score, label):
        assert get_score_label(score) == label


class TestBreakdown:

    def test_scores_and_notes(self):
        features = FeatureVector(budget_match=1.0, timeline_match=0.35, authority_level=0.9)
        breakdown = build_breakdown(features)
        assert breakdown["Budget"].score == 100
        assert breakdown["Budget"].note == "Within ideal range"
        assert breakdown["Timeline"].score == 35
        assert breakdown["Timeline"].note == "Long-term prospect"
        assert breakdown["Authority"].note == "Decision maker"

    def test_authority_note_uses_buying_role(self):
        enrichment = EnrichmentData(authority=AuthorityAssessment(buying_role="influencer"))
        assert build_breakdown(FeatureVector(), enrichment)["Authority"].note == "influencer"

    def test_reasoning_prefers_enrichment_summaries(self):
        enrichment = EnrichmentData(
            intent=IntentAnalysis(summary="Evaluating vendors this quarter."),
            company=CompanyResearch(summary="Series C, hiring fast."),
        )
        assert build_reasoning(ScoreLabel.WARM, enrichment) == "Evaluating vendors this quarter. Series C, hiring fast."
        assert build_reasoning(ScoreLabel.HOT) == "Strong buying signals detected."

    @pytest.mark.parametrize("label,features,expected", [
        (ScoreLabel.HOT, FeatureVector(authority_level=0.9), "Schedule a discovery call"),
        (ScoreLabel.HOT, FeatureVector(authority_level=0.3), "Request introduction"),
        (ScoreLabel.WARM, FeatureVector(buying_intent_score=0.7), "Send personalized demo"),
        (ScoreLabel.WARM, FeatureVector(buying_intent_score=0.2), "Nurture"),
        (ScoreLabel.COLD, FeatureVector(data_completeness=0.2), "Gather more information"),
        (ScoreLabel.COLD, FeatureVector(data_completeness=0.9), "automated nurture"),
    ])
    def test_recommended_action(self, label, features, expected):
        assert expected in recommend_action(label, features)


class TestScenarios:

    def test_strong_lead_is_hot(self):
        lead = LeadData(
            email="dana@acme.io",
            first_name="Dana",
            last_name="Reyes",
            phone="+1 555 0100",
            job_title="VP of Sales",
            company_name="Acme",
            company_website="https://acme.io",
            company_size="500+ employees",
            industry="Technology / SaaS",
            budget_range="$150,000",
            timeline="Immediately",
            challenge="Lead routing is manual",
        )
        criteria = [
            ICPCriterionData(name="Company Size", type=CriterionType.COMPANY_SIZE,
                             ideal_values=["201-500 employees", "500+ employees"]),
            ICPCriterionData(name="Industry", type=CriterionType.INDUSTRY, ideal_values=["Technology / SaaS"]),
            ICPCriterionData(name="Budget", type=CriterionType.BUDGET, ideal_values=["$100,000+"]),
        ]
        enrichment = EnrichmentData(
            company=CompanyResearch(health_score=9),
            intent=IntentAnalysis(buying_intent_score=90, urgency_score=0.9),
            authority=AuthorityAssessment(authority_level=0.9, buying_role="decision_maker"),
        )
        behavioral = BehavioralScores(engagement_score=90, intent_score=95, recency_score=90, frequency_score=80)

        features, result = qualify(lead, criteria, enrichment, behavioral, TrackingParams(gclid="abc"))

        assert features.budget_match >= 0.85
        assert features.job_title_match >= 0.9
        assert result.score >= 80
        assert result.label == ScoreLabel.HOT
        assert result.model_version is None
        assert "Schedule a discovery call" in result.recommended_action

    def test_empty_lead_is_never_hot(self):
        features, result = qualify(LeadData(email="someone@example.com"))
        assert 40 <= result.score <= 60
        assert result.label != ScoreLabel.HOT
