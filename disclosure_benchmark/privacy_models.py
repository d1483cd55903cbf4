"""
Privacy criteria and privacy configurations for the benchmark.

Defines the constraint values handed to the anonymization engine:
  - KAnonymity: minimal equivalence class size k
  - DistinctLDiversity: at least l distinct sensitive values per class
  - HierarchicalDistanceTCloseness: sensitive distribution within distance t,
    measured on the sensitive attribute's own hierarchy
  - EnhancedBLikeness: relative belief gain bounded by b

Checking the criteria is the engine's job; this module only builds them.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

from .benchmark_setup import (
    BASELINE_K,
    LOCAL_ITERATIONS,
    BenchmarkDataset,
    PrivacyModel,
    check_sensitive_attribute,
)
from .data_loader import DataLoader, Hierarchy
from .exceptions import ConfigurationError, UnknownModelError
from .quality import LossMetric

# Configure logging
logger = logging.getLogger(__name__)


class PrivacyCriterion:
    """
    Base class for privacy criteria.

    Subclasses are frozen dataclasses and declare the privacy model they
    implement in the `model` class attribute.
    """

    model: ClassVar[PrivacyModel]

    @property
    def attribute(self) -> Optional[str]:
        """Sensitive attribute protected by the criterion, if any."""
        return None


@dataclass(frozen=True)
class KAnonymity(PrivacyCriterion):
    k: int

    model: ClassVar[PrivacyModel] = PrivacyModel.K_ANONYMITY

    def __str__(self) -> str:
        return f"{self.k}-anonymity"


@dataclass(frozen=True)
class DistinctLDiversity(PrivacyCriterion):
    sensitive: str
    l: int

    model: ClassVar[PrivacyModel] = PrivacyModel.DISTINCT_L_DIVERSITY

    @property
    def attribute(self) -> Optional[str]:
        return self.sensitive

    def __str__(self) -> str:
        return f"distinct-{self.l}-diversity for attribute '{self.sensitive}'"


@dataclass(frozen=True)
class HierarchicalDistanceTCloseness(PrivacyCriterion):
    sensitive: str
    t: float
    hierarchy: Hierarchy = field(compare=False, repr=False)

    model: ClassVar[PrivacyModel] = PrivacyModel.T_CLOSENESS

    @property
    def attribute(self) -> Optional[str]:
        return self.sensitive

    def __str__(self) -> str:
        return f"{self.t}-closeness with hierarchical ground-distance for attribute '{self.sensitive}'"


@dataclass(frozen=True)
class EnhancedBLikeness(PrivacyCriterion):
    sensitive: str
    b: float

    model: ClassVar[PrivacyModel] = PrivacyModel.ENHANCED_B_LIKENESS

    @property
    def attribute(self) -> Optional[str]:
        return self.sensitive

    def __str__(self) -> str:
        return f"enhanced-{self.b}-likeness for attribute '{self.sensitive}'"


def build_privacy_model(
    loader: DataLoader,
    dataset: BenchmarkDataset,
    model: PrivacyModel,
    sensitive: str,
    threshold: float
) -> PrivacyCriterion:
    """
    Build the privacy criterion for a (model, dataset, attribute, threshold) tuple.

    - K_ANONYMITY: k = ceil(threshold)
    - DISTINCT_L_DIVERSITY: l = int(threshold), truncated
    - T_CLOSENESS: t = threshold, with the hierarchy of the sensitive attribute
    - ENHANCED_B_LIKENESS: b = threshold

    Args:
        loader: Loader used for the t-closeness hierarchy
        dataset: Benchmark dataset
        model: Privacy model
        sensitive: Sensitive attribute (ignored by k-anonymity)
        threshold: Model threshold

    Returns:
        PrivacyCriterion ready to be registered in a configuration

    Raises:
        UnknownModelError: model outside the enumeration
        InvalidAttributeError: disclosure model on an unregistered attribute
        HierarchyLoadError: t-closeness hierarchy cannot be loaded
    """
    if model is PrivacyModel.K_ANONYMITY:
        return KAnonymity(int(math.ceil(threshold)))
    elif model is PrivacyModel.DISTINCT_L_DIVERSITY:
        check_sensitive_attribute(dataset, sensitive)
        return DistinctLDiversity(sensitive, int(threshold))
    elif model is PrivacyModel.T_CLOSENESS:
        check_sensitive_attribute(dataset, sensitive)
        return HierarchicalDistanceTCloseness(
            sensitive, float(threshold), loader.load_hierarchy(dataset, sensitive)
        )
    elif model is PrivacyModel.ENHANCED_B_LIKENESS:
        check_sensitive_attribute(dataset, sensitive)
        return EnhancedBLikeness(sensitive, float(threshold))
    else:
        raise UnknownModelError(f"Unknown privacy model: {model!r}")


@dataclass
class PrivacyConfiguration:
    """
    Set of privacy criteria enforced jointly, plus search parameters.

    Attributes:
        criteria: Ordered criteria, all of which must hold
        suppression_limit: Maximal fraction of records that may be suppressed
        quality_model: Objective minimized by the engine and reported as loss
    """
    criteria: List[PrivacyCriterion] = field(default_factory=list)
    suppression_limit: float = 1.0 - 1.0 / LOCAL_ITERATIONS
    quality_model: LossMetric = field(default_factory=LossMetric)

    def add_privacy_model(self, criterion: PrivacyCriterion) -> "PrivacyConfiguration":
        self.criteria.append(criterion)
        return self

    @property
    def models(self) -> List[PrivacyModel]:
        return [c.model for c in self.criteria]

    def get_privacy_model(self, model: PrivacyModel) -> Optional[PrivacyCriterion]:
        """Return the first criterion of the given model, or None."""
        for criterion in self.criteria:
            if criterion.model is model:
                return criterion
        return None

    def validate(self) -> None:
        """Raise ConfigurationError if the configuration cannot be handed to an engine."""
        if not self.criteria:
            raise ConfigurationError("Privacy configuration without criteria")
        if not 0.0 <= self.suppression_limit <= 1.0:
            raise ConfigurationError(f"Suppression limit out of range: {self.suppression_limit}")


def create_configuration(
    loader: DataLoader,
    dataset: BenchmarkDataset,
    model: PrivacyModel,
    sensitive: str,
    threshold: float,
    local_iterations: int = LOCAL_ITERATIONS
) -> PrivacyConfiguration:
    """
    Build the privacy configuration of one benchmark run.

    Disclosure models are always combined with 5-anonymity, registered after
    the primary criterion. The suppression limit leaves a 1/local_iterations
    share of the records for the local optimization pass.
    """
    config = PrivacyConfiguration(
        suppression_limit=1.0 - 1.0 / local_iterations,
        quality_model=LossMetric(),
    )

    config.add_privacy_model(build_privacy_model(loader, dataset, model, sensitive, threshold))

    # Always combine sensitive-attribute models with 5-anonymity
    if model.is_disclosure_model:
        config.add_privacy_model(
            build_privacy_model(loader, dataset, PrivacyModel.K_ANONYMITY, sensitive, BASELINE_K)
        )

    config.validate()
    logger.debug(f"Configured {', '.join(str(c) for c in config.criteria)}")

    return config
