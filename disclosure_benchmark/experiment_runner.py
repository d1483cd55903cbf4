"""
Orchestrates the attribute disclosure benchmark.

Enumerates the parameter space (privacy model x dataset x sensitive
attribute x threshold), runs the anonymization engine once per tuple, and
measures every node of the resulting transformation lattice after a bounded
local optimization pass.

Failures tied to one tuple (unreadable data or hierarchies, engine or
measurement failures) abort that tuple only and are returned as an aborted
RunOutcome. Configuration defects propagate and stop the sweep.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

import pandas as pd
from tqdm import tqdm

from .anonymization_engine import (
    AnonymizationEngine,
    AnonymizationResult,
    DataHandle,
    TransformationNode,
)
from .benchmark_setup import (
    LOCAL_ITERATIONS,
    BenchmarkDataset,
    PrivacyModel,
    get_sensitive_attributes,
    get_thresholds,
)
from .data_loader import DataLoader, configure_data
from .display_utils import format_run_label
from .exceptions import ConfigurationError, EngineError, RunAbortedError
from .measurement import MeasurementRecorder
from .privacy_models import PrivacyConfiguration, create_configuration

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterTuple:
    """One point of the parameter space."""
    model: PrivacyModel
    dataset: BenchmarkDataset
    attribute: str
    threshold: float

    @property
    def label(self) -> str:
        return format_run_label(self.dataset, self.attribute, self.model, self.threshold)


def enumerate_parameter_space(
    models: Sequence[PrivacyModel] = tuple(PrivacyModel),
    datasets: Sequence[BenchmarkDataset] = tuple(BenchmarkDataset)
) -> Iterator[ParameterTuple]:
    """
    Lazily yield every parameter tuple of the sweep.

    Nesting order: model, dataset, sensitive attribute, threshold.

    Raises:
        ConfigurationError: a sensitive attribute without thresholds
    """
    for model in models:
        for dataset in datasets:
            for attribute in get_sensitive_attributes(dataset):
                thresholds = get_thresholds(model, dataset, attribute)
                if not thresholds:
                    raise ConfigurationError(
                        f"No thresholds for {model} on {dataset}/{attribute}"
                    )
                for threshold in thresholds:
                    yield ParameterTuple(model, dataset, attribute, threshold)


def validate_parameter_space(
    models: Sequence[PrivacyModel] = tuple(PrivacyModel),
    datasets: Sequence[BenchmarkDataset] = tuple(BenchmarkDataset)
) -> int:
    """Walk the whole parameter space eagerly. Returns the number of tuples."""
    return sum(1 for _ in enumerate_parameter_space(models, datasets))


@dataclass
class RunOutcome:
    """
    Outcome of one parameter tuple.

    Attributes:
        params: Parameter tuple
        records_written: Run records persisted for this tuple
        n_nodes: Nodes of the lattice (None if the engine was not reached)
        error: Error message if the tuple was aborted
        error_type: Exception class name if the tuple was aborted
        failed_transformation: Level vector being processed when it aborted
        elapsed_seconds: Wall-clock time of the run
    """
    params: ParameterTuple
    records_written: int = 0
    n_nodes: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    failed_transformation: Optional[str] = None
    elapsed_seconds: float = 0.0

    @property
    def completed(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dataset': str(self.params.dataset),
            'sensitive': self.params.attribute,
            'model': str(self.params.model),
            'threshold': float(self.params.threshold),
            'completed': self.completed,
            'records_written': self.records_written,
            'n_nodes': self.n_nodes,
            'error_type': self.error_type,
            'error': self.error,
            'failed_transformation': self.failed_transformation,
            'elapsed_seconds': self.elapsed_seconds,
        }


@dataclass
class SweepSummary:
    """Outcomes of a sweep, in processing order."""
    outcomes: List[RunOutcome] = field(default_factory=list)

    @property
    def n_tuples(self) -> int:
        return len(self.outcomes)

    @property
    def n_completed(self) -> int:
        return sum(1 for o in self.outcomes if o.completed)

    @property
    def n_aborted(self) -> int:
        return self.n_tuples - self.n_completed

    @property
    def records_written(self) -> int:
        return sum(o.records_written for o in self.outcomes)

    @property
    def aborted(self) -> List[RunOutcome]:
        return [o for o in self.outcomes if not o.completed]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([o.to_dict() for o in self.outcomes])


class ExperimentRunner:
    """
    Runs benchmark tuples against an anonymization engine.

    This class manages the per-tuple workflow:
        1. Configures the dataset and the privacy configuration
        2. Invokes the engine once to obtain the transformation lattice
        3. Visits every node level by level, materializes and refines its
           output, and hands it to the recorder
        4. Releases each output as soon as it is measured

    Attributes:
        loader (DataLoader): Source of datasets and hierarchies
        engine (AnonymizationEngine): External anonymization engine
        recorder (MeasurementRecorder): Measures and persists outputs
        local_iterations (int): Granularity of the local optimization pass

    Example:
        >>> runner = ExperimentRunner(loader, engine, recorder)
        >>> summary = runner.run_sweep(enumerate_parameter_space())
        >>> print(f"{summary.records_written} records")
    """

    def __init__(
        self,
        loader: DataLoader,
        engine: AnonymizationEngine,
        recorder: MeasurementRecorder,
        local_iterations: int = LOCAL_ITERATIONS
    ):
        if local_iterations < 1:
            raise ConfigurationError(f"local_iterations must be positive, got {local_iterations}")

        self.loader = loader
        self.engine = engine
        self.recorder = recorder
        self.local_iterations = local_iterations

        logger.info(f"ExperimentRunner initialized with {type(engine).__name__}, "
                    f"{local_iterations} local iterations")

    def build_configuration(self, params: ParameterTuple) -> PrivacyConfiguration:
        """Privacy configuration of a tuple (disclosure models combined with 5-anonymity)."""
        return create_configuration(
            self.loader,
            params.dataset,
            params.model,
            params.attribute,
            params.threshold,
            local_iterations=self.local_iterations,
        )

    def _anonymize(self, params: ParameterTuple, data, config: PrivacyConfiguration) -> AnonymizationResult:
        try:
            return self.engine.anonymize(data, config)
        except RunAbortedError:
            raise
        except Exception as e:
            raise EngineError(f"Anonymization failed: {e}", run_label=params.label) from e

    def _materialize(self, params: ParameterTuple, result: AnonymizationResult,
                     node: TransformationNode) -> DataHandle:
        try:
            return result.get_output(node)
        except RunAbortedError:
            raise
        except Exception as e:
            raise EngineError(f"Cannot materialize output: {e}",
                              run_label=params.label, transformation=str(node)) from e

    def _optimize(self, params: ParameterTuple, result: AnonymizationResult,
                  node: TransformationNode, output: DataHandle) -> None:
        try:
            result.optimize_iterative_fast(output, 1.0 / self.local_iterations)
        except RunAbortedError:
            raise
        except Exception as e:
            raise EngineError(f"Local optimization failed: {e}",
                              run_label=params.label, transformation=str(node)) from e

    def _process_node(
        self,
        params: ParameterTuple,
        config: PrivacyConfiguration,
        result: AnonymizationResult,
        node: TransformationNode
    ) -> None:
        output = self._materialize(params, result, node)
        try:
            self._optimize(params, result, node, output)
            self.recorder.record(params, node.transformation, output, config.quality_model)
        finally:
            output.release()

    def run(self, params: ParameterTuple) -> RunOutcome:
        """
        Run one parameter tuple.

        Args:
            params: Parameter tuple to benchmark

        Returns:
            RunOutcome, aborted if a tuple-fatal error occurred

        Raises:
            ConfigurationError: defect in the static tables
        """
        start_time = time.time()
        outcome = RunOutcome(params)
        node = None

        logger.info(f"Benchmarking {params.label}")

        try:
            data = configure_data(self.loader, params.dataset, params.attribute, params.model)
            config = self.build_configuration(params)
            result = self._anonymize(params, data, config)

            lattice = result.lattice
            outcome.n_nodes = len(lattice)
            logger.info(f"Lattice of {params.label}: {len(lattice)} nodes on "
                        f"{lattice.top.total_generalization_level + 1} levels")

            # For each level, for each node on that level
            for node in lattice.iter_nodes():
                self._process_node(params, config, result, node)
                outcome.records_written += 1

        except RunAbortedError as e:
            e.run_label = e.run_label or params.label
            if node is not None:
                e.transformation = e.transformation or str(node)
            outcome.error = str(e)
            outcome.error_type = type(e).__name__
            outcome.failed_transformation = e.transformation
            logger.error(f"Aborted {params.label}: {e}", exc_info=True)

        outcome.elapsed_seconds = time.time() - start_time
        return outcome

    def run_sweep(
        self,
        parameter_space: Iterable[ParameterTuple],
        show_progress: bool = True
    ) -> SweepSummary:
        """
        Run parameter tuples sequentially, in the given order.

        Aborted tuples are logged and skipped; configuration errors propagate.

        Args:
            parameter_space: Tuples to run (usually enumerate_parameter_space())
            show_progress: Whether to show a progress bar

        Returns:
            SweepSummary with one outcome per tuple
        """
        summary = SweepSummary()
        iterator = tqdm(parameter_space, desc="Benchmark", unit="tuple") if show_progress else parameter_space

        for params in iterator:
            summary.outcomes.append(self.run(params))

        logger.info(f"Sweep finished: {summary.n_completed}/{summary.n_tuples} tuples completed, "
                    f"{summary.records_written} records written")

        return summary
