"""
Feature vector schema and storage round trip.
"""
import pytest
from pydantic import ValidationError

from lead_qualifier.schemas.features import (
    BEHAVIORAL_FEATURES, FEATURE_KEYS, FeatureVector, deserialize_features, feature_keys,
    serialize_features
)


class TestFeatureVector:

    def test_defaults_are_neutral(self):
        vector = FeatureVector()
        assert all(getattr(vector, key) == 0.5 for key in FEATURE_KEYS)

    def test_has_sixteen_features(self):
        assert len(FEATURE_KEYS) == 16

    def test_rejects_out_of_range_values(self):
        with pytest.raises(ValidationError):
            FeatureVector(budget_match=1.5)
        with pytest.raises(ValidationError):
            FeatureVector(contact_quality=-0.1)

    def test_is_immutable(self):
        vector = FeatureVector()
        with pytest.raises(ValidationError):
            vector.budget_match = 0.9

    def test_feature_keys_without_behavioral_group(self):
        keys = feature_keys(include_behavioral=False)
        assert len(keys) == 11
        assert not set(keys) & set(BEHAVIORAL_FEATURES)


class TestSerialization:

    def test_round_trip(self):
        vector = FeatureVector(budget_match=0.91, job_title_match=1.0, recency_score=0.12)
        assert deserialize_features(serialize_features(vector)) == vector

    def test_missing_and_unreadable_fields_become_neutral(self):
        vector = deserialize_features({
            "budget_match": "abc",
            "industry_match": None,
            "timeline_match": True,
            "job_title_match": 0.8,
        })
        assert vector.budget_match == 0.5
        assert vector.industry_match == 0.5
        assert vector.timeline_match == 0.5
        assert vector.company_size_match == 0.5
        assert vector.job_title_match == 0.8

    def test_out_of_range_values_are_clamped(self):
        vector = deserialize_features({"budget_match": 3, "industry_match": -2})
        assert vector.budget_match == 1.0
        assert vector.industry_match == 0.0

    @pytest.mark.parametrize("data", [None, [], "not a dict", 42])
    def test_non_mapping_storage_yields_neutral_vector(self, data):
        assert deserialize_features(data) == FeatureVector()
