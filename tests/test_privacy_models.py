#!/usr/bin/env python3
"""
Tests for privacy criteria and the configuration of a run.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from disclosure_benchmark.benchmark_setup import BenchmarkDataset, PrivacyModel
from disclosure_benchmark.exceptions import (
    ConfigurationError,
    InvalidAttributeError,
    UnknownModelError,
)
from disclosure_benchmark.privacy_models import (
    DistinctLDiversity,
    EnhancedBLikeness,
    HierarchicalDistanceTCloseness,
    KAnonymity,
    PrivacyConfiguration,
    build_privacy_model,
    create_configuration,
)
from disclosure_benchmark.quality import AggregateFunction, LossMetric

CENSUS = BenchmarkDataset.CENSUS
HEALTH = BenchmarkDataset.HEALTH


class TestBuildPrivacyModel:
    """Threshold conversion per model."""

    @pytest.mark.parametrize("threshold,expected", [(5.0, 5), (4.2, 5), (1.0, 1)])
    def test_k_is_rounded_up(self, loader, threshold, expected):
        criterion = build_privacy_model(loader, CENSUS, PrivacyModel.K_ANONYMITY, "Education", threshold)
        assert criterion == KAnonymity(expected)

    @pytest.mark.parametrize("threshold,expected", [(4.9, 4), (10.0, 10), (1.0, 1)])
    def test_l_is_truncated(self, loader, threshold, expected):
        criterion = build_privacy_model(loader, HEALTH, PrivacyModel.DISTINCT_L_DIVERSITY, "EDUC", threshold)
        assert criterion == DistinctLDiversity("EDUC", expected)

    def test_t_closeness_uses_sensitive_hierarchy(self, loader):
        criterion = build_privacy_model(loader, HEALTH, PrivacyModel.T_CLOSENESS, "MARSTAT", 0.6)

        assert isinstance(criterion, HierarchicalDistanceTCloseness)
        assert criterion.t == 0.6
        assert criterion.attribute == "MARSTAT"
        assert criterion.hierarchy.attribute == "MARSTAT"
        assert criterion.hierarchy.values == ["10", "20", "30", "40"]

    def test_b_likeness(self, loader):
        criterion = build_privacy_model(loader, CENSUS, PrivacyModel.ENHANCED_B_LIKENESS, "Education", 3.0)
        assert criterion == EnhancedBLikeness("Education", 3.0)
        assert criterion.model is PrivacyModel.ENHANCED_B_LIKENESS

    def test_unregistered_attribute(self, loader):
        with pytest.raises(InvalidAttributeError):
            build_privacy_model(loader, CENSUS, PrivacyModel.DISTINCT_L_DIVERSITY, "Race", 2.0)

    def test_unknown_model(self, loader):
        with pytest.raises(UnknownModelError):
            build_privacy_model(loader, CENSUS, "DELTA_PRESENCE", "Education", 2.0)


class TestCreateConfiguration:
    """Composition of criteria and search parameters."""

    def test_k_anonymity_alone(self, loader):
        config = create_configuration(loader, CENSUS, PrivacyModel.K_ANONYMITY, "Marital status", 5.0)

        assert config.criteria == [KAnonymity(5)]
        assert config.suppression_limit == pytest.approx(0.99)

    @pytest.mark.parametrize("model,threshold", [
        (PrivacyModel.T_CLOSENESS, 0.2),
        (PrivacyModel.ENHANCED_B_LIKENESS, 1.0),
        (PrivacyModel.DISTINCT_L_DIVERSITY, 3.0),
    ])
    def test_disclosure_models_get_baseline_k(self, loader, model, threshold):
        config = create_configuration(loader, HEALTH, model, "EDUC", threshold)

        assert config.models == [model, PrivacyModel.K_ANONYMITY]
        assert config.get_privacy_model(PrivacyModel.K_ANONYMITY) == KAnonymity(5)
        assert config.get_privacy_model(model).attribute == "EDUC"

    def test_quality_model(self, loader):
        config = create_configuration(loader, CENSUS, PrivacyModel.T_CLOSENESS, "Education", 1.0)
        assert config.quality_model == LossMetric(0.0, AggregateFunction.ARITHMETIC_MEAN)

    def test_local_iterations_drive_suppression_limit(self, loader):
        config = create_configuration(loader, CENSUS, PrivacyModel.K_ANONYMITY, "Education", 5.0,
                                      local_iterations=4)
        assert config.suppression_limit == pytest.approx(0.75)

    def test_empty_configuration_is_invalid(self):
        with pytest.raises(ConfigurationError):
            PrivacyConfiguration().validate()

    def test_suppression_limit_out_of_range(self):
        config = PrivacyConfiguration(criteria=[KAnonymity(2)], suppression_limit=1.5)
        with pytest.raises(ConfigurationError):
            config.validate()
