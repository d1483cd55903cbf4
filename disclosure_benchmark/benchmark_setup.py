# =============================================================================
# benchmark_setup.py
# =============================================================================
# Static tables of the attribute disclosure benchmark.
#
# This module defines:
#   - The closed set of privacy models under test
#   - The closed set of benchmark datasets, with their storage paths,
#     quasi-identifiers, sensitive attributes and hierarchy file naming
#   - The threshold grid for each (model, dataset, attribute) combination
#   - Process-wide constants shared by the runner and the recorder
#
# Every lookup dispatches exhaustively over the enumerations and raises on
# anything it does not know, so adding a model or dataset without extending
# the tables fails loudly instead of silently defaulting.
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from .exceptions import ConfigurationError, InvalidAttributeError, UnknownModelError

# Configure logging
logger = logging.getLogger(__name__)

# Granularity of the local optimization pass
LOCAL_ITERATIONS = 100

# k used for the baseline constraint combined with every disclosure model
BASELINE_K = 5

# Default location of the results table, relative to the working directory
RESULTS_FILENAME = "results/results.csv"

# Field separator of dataset, hierarchy and results files
CSV_SEPARATOR = ";"


class PrivacyModel(Enum):
    """Privacy models under test, in sweep order."""

    K_ANONYMITY = "K_ANONYMITY"
    T_CLOSENESS = "T_CLOSENESS"
    ENHANCED_B_LIKENESS = "ENHANCED_B_LIKENESS"
    DISTINCT_L_DIVERSITY = "DISTINCT_L_DIVERSITY"

    @property
    def is_disclosure_model(self) -> bool:
        """True for models that protect a sensitive attribute."""
        return self is not PrivacyModel.K_ANONYMITY

    def __str__(self) -> str:
        return self.value


class BenchmarkDataset(Enum):
    """Benchmark datasets, in sweep order."""

    CENSUS = "Census"
    HEALTH = "Health interviews"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DatasetSpec:
    """
    Storage and attribute layout of a benchmark dataset.

    Attributes:
        data_path: Path of the semicolon-separated data file
        quasi_identifiers: Ordered quasi-identifying attributes
        sensitive_attributes: Attributes eligible for disclosure testing
        hierarchy_prefix: Prefix of the hierarchy files, completed with
                          '<attribute>.csv'
    """
    data_path: str
    quasi_identifiers: Tuple[str, ...]
    sensitive_attributes: Tuple[str, ...]
    hierarchy_prefix: str

    def hierarchy_path(self, attribute: str) -> str:
        """Relative path of the hierarchy file for an attribute."""
        return f"{self.hierarchy_prefix}{attribute}.csv"


DATASETS: Dict[BenchmarkDataset, DatasetSpec] = {
    BenchmarkDataset.CENSUS: DatasetSpec(
        data_path="data/ss13acs.csv",
        quasi_identifiers=("Sex", "Age", "Race"),
        sensitive_attributes=("Marital status", "Education"),
        hierarchy_prefix="hierarchies/ss13acs_hierarchy_",
    ),
    BenchmarkDataset.HEALTH: DatasetSpec(
        data_path="data/ihis.csv",
        quasi_identifiers=("SEX", "AGE", "RACEA"),
        sensitive_attributes=("MARSTAT", "EDUC"),
        hierarchy_prefix="hierarchies/ihis_hierarchy_",
    ),
}

# Threshold grids
K_ANONYMITY_THRESHOLDS = (5.0,)
T_CLOSENESS_THRESHOLDS = (1.0, 0.8, 0.6, 0.4, 0.2)
B_LIKENESS_THRESHOLDS = (6.0, 5.0, 4.0, 3.0, 2.0, 1.0)

_WIDE_L_GRID = (1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 8.0, 10.0, 12.0, 14.0, 16.0, 18.0, 20.0, 25.0)

L_DIVERSITY_THRESHOLDS: Dict[BenchmarkDataset, Dict[str, Tuple[float, ...]]] = {
    BenchmarkDataset.CENSUS: {
        "Marital status": (1.0, 2.0, 3.0, 4.0, 5.0),
        "Education": _WIDE_L_GRID,
    },
    BenchmarkDataset.HEALTH: {
        "MARSTAT": (1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 8.0, 10.0),
        "EDUC": _WIDE_L_GRID,
    },
}


def get_dataset_spec(dataset: BenchmarkDataset) -> DatasetSpec:
    """Return the storage/attribute layout of a dataset."""
    try:
        return DATASETS[dataset]
    except KeyError:
        raise ConfigurationError(f"Invalid dataset: {dataset!r}") from None


def get_sensitive_attributes(dataset: BenchmarkDataset) -> List[str]:
    """Return the sensitive attributes registered for a dataset."""
    return list(get_dataset_spec(dataset).sensitive_attributes)


def get_quasi_identifying_attributes(dataset: BenchmarkDataset) -> List[str]:
    """Return the quasi-identifiers of a dataset, in declaration order."""
    return list(get_dataset_spec(dataset).quasi_identifiers)


def check_sensitive_attribute(dataset: BenchmarkDataset, attribute: str) -> None:
    """Raise InvalidAttributeError unless attribute is registered as sensitive."""
    if attribute not in get_dataset_spec(dataset).sensitive_attributes:
        raise InvalidAttributeError(
            f"Invalid attribute: {attribute!r} is not a sensitive attribute of {dataset}"
        )


def get_thresholds(
    model: PrivacyModel,
    dataset: BenchmarkDataset,
    attribute: str
) -> List[float]:
    """
    Return the threshold grid for a (model, dataset, attribute) combination.

    Thresholds are ordered as they are swept: ascending for l-diversity,
    descending severity for t-closeness and b-likeness.

    Args:
        model: Privacy model under test
        dataset: Benchmark dataset
        attribute: Sensitive attribute

    Returns:
        Fresh list of thresholds (identical across calls)

    Raises:
        InvalidAttributeError: attribute not registered for the dataset
        UnknownModelError: model outside the enumeration
        ConfigurationError: dataset outside the enumeration
    """
    check_sensitive_attribute(dataset, attribute)

    if model is PrivacyModel.K_ANONYMITY:
        return list(K_ANONYMITY_THRESHOLDS)
    elif model is PrivacyModel.DISTINCT_L_DIVERSITY:
        per_attribute = L_DIVERSITY_THRESHOLDS.get(dataset)
        if per_attribute is None:
            raise ConfigurationError(f"Unknown dataset: {dataset}")
        if attribute not in per_attribute:
            raise InvalidAttributeError(f"Invalid attribute: {attribute}")
        return list(per_attribute[attribute])
    elif model is PrivacyModel.T_CLOSENESS:
        return list(T_CLOSENESS_THRESHOLDS)
    elif model is PrivacyModel.ENHANCED_B_LIKENESS:
        return list(B_LIKENESS_THRESHOLDS)
    else:
        raise UnknownModelError(f"Unknown privacy model: {model!r}")
