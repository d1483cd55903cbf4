# =============================================================================
# Attribute Disclosure Benchmark
# =============================================================================
#
# This package benchmarks methods for protecting data from attribute
# disclosure (k-anonymity, distinct l-diversity, hierarchical t-closeness,
# enhanced b-likeness) by recording information loss and classification
# accuracy for every transformation an anonymization engine considers.
#
# Modules:
#   - benchmark_setup: Privacy models, datasets, thresholds and constants
#   - data_loader: Load datasets/hierarchies and configure attribute roles
#   - privacy_models: Privacy criteria and privacy configurations
#   - anonymization_engine: Engine interfaces and the transformation lattice
#   - quality, classification: The two measured metrics
#   - results_store, measurement: Crash-safe recording of measurements
#   - experiment_runner: Enumerate the parameter space and run the sweep
#   - visualization: Loss/accuracy trade-off figures
# =============================================================================

__version__ = "1.0.0"

from .benchmark_setup import (
    LOCAL_ITERATIONS,
    BenchmarkDataset,
    PrivacyModel,
    get_quasi_identifying_attributes,
    get_sensitive_attributes,
    get_thresholds,
)
from .exceptions import (
    BenchmarkError,
    ConfigurationError,
    DatasetLoadError,
    EngineError,
    HierarchyLoadError,
    InvalidAttributeError,
    MeasurementError,
    RunAbortedError,
    UnknownModelError,
)
from .data_loader import AttributeType, Data, DataLoader, Hierarchy, configure_data
from .privacy_models import PrivacyConfiguration, build_privacy_model, create_configuration
from .anonymization_engine import (
    AnonymizationEngine,
    AnonymizationResult,
    DataHandle,
    TransformationLattice,
    TransformationNode,
    load_engine,
)
from .results_store import CsvResultsStore, InMemoryResultsStore, RunRecord
from .measurement import MeasurementRecorder
from .experiment_runner import (
    ExperimentRunner,
    ParameterTuple,
    RunOutcome,
    SweepSummary,
    enumerate_parameter_space,
    validate_parameter_space,
)

__all__ = [
    "LOCAL_ITERATIONS",
    "BenchmarkDataset",
    "PrivacyModel",
    "get_quasi_identifying_attributes",
    "get_sensitive_attributes",
    "get_thresholds",
    "BenchmarkError",
    "ConfigurationError",
    "DatasetLoadError",
    "EngineError",
    "HierarchyLoadError",
    "InvalidAttributeError",
    "MeasurementError",
    "RunAbortedError",
    "UnknownModelError",
    "AttributeType",
    "Data",
    "DataLoader",
    "Hierarchy",
    "configure_data",
    "PrivacyConfiguration",
    "build_privacy_model",
    "create_configuration",
    "AnonymizationEngine",
    "AnonymizationResult",
    "DataHandle",
    "TransformationLattice",
    "TransformationNode",
    "load_engine",
    "CsvResultsStore",
    "InMemoryResultsStore",
    "RunRecord",
    "MeasurementRecorder",
    "ExperimentRunner",
    "ParameterTuple",
    "RunOutcome",
    "SweepSummary",
    "enumerate_parameter_space",
    "validate_parameter_space",
]
