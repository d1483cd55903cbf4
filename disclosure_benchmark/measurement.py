"""
Measurement of materialized transformation outputs.

For every lattice node the recorder computes
  - quality_loss: information loss under the configuration's quality model
  - accuracy_lr_anon: logistic regression accuracy for the sensitive attribute
and appends one RunRecord to the results store, which is flushed to stable
storage before record() returns.
"""

import logging
import math
from typing import Sequence, TYPE_CHECKING

from .anonymization_engine import DataHandle
from .benchmark_setup import get_quasi_identifying_attributes
from .classification import ClassificationConfiguration, LogisticRegressionClassifier
from .display_utils import format_transformation
from .exceptions import MeasurementError
from .quality import LossMetric
from .results_store import ResultsStore, RunRecord

if TYPE_CHECKING:
    from .experiment_runner import ParameterTuple

# Configure logging
logger = logging.getLogger(__name__)


class MeasurementRecorder:
    """
    Measures outputs and records them in a results store.

    Attributes:
        store (ResultsStore): Accumulator shared by the whole sweep
        classifier (LogisticRegressionClassifier): Accuracy estimator
        classification_config (ClassificationConfiguration): 3 folds, all records
    """

    def __init__(
        self,
        store: ResultsStore,
        classifier: LogisticRegressionClassifier = None,
        classification_config: ClassificationConfiguration = None
    ):
        self.store = store
        self.classifier = classifier or LogisticRegressionClassifier()
        self.classification_config = classification_config or (
            ClassificationConfiguration.create_logistic_regression()
            .with_num_folds(3)
            .with_max_records(None)
        )

    def record(
        self,
        params: "ParameterTuple",
        transformation: Sequence[int],
        output: DataHandle,
        quality_model: LossMetric
    ) -> RunRecord:
        """
        Measure one output and persist it.

        Args:
            params: Parameter tuple of the current run
            transformation: Level vector of the originating node
            output: Materialized (and refined) output
            quality_model: Quality model of the run's configuration

        Returns:
            The appended RunRecord

        Raises:
            MeasurementError: a metric could not be computed; nothing is appended
        """
        transformation_label = format_transformation(transformation)
        label = params.label
        logger.info(f"Run: {label}/{transformation_label}")

        quasi_identifiers = get_quasi_identifying_attributes(params.dataset)

        try:
            loss = quality_model.evaluate(output, quasi_identifiers)
            accuracy = self.classifier.accuracy(
                output.frame, quasi_identifiers, params.attribute, self.classification_config
            )
        except MeasurementError as e:
            e.run_label = e.run_label or label
            e.transformation = e.transformation or transformation_label
            raise
        except Exception as e:
            # Output handles belong to the external engine and may raise anything
            raise MeasurementError(f"Measurement failed: {e}", run_label=label,
                                   transformation=transformation_label) from e

        for name, value in (("quality_loss", loss), ("accuracy_lr_anon", accuracy)):
            if not math.isfinite(value) or value < 0:
                raise MeasurementError(f"Invalid {name}: {value}", run_label=label,
                                       transformation=transformation_label)

        record = RunRecord(
            dataset=str(params.dataset),
            sensitive=params.attribute,
            model=str(params.model),
            threshold=float(params.threshold),
            transformation=transformation_label,
            quality_loss=loss,
            accuracy_lr_anon=accuracy,
        )

        self.store.append(record)
        self.store.flush()

        logger.debug(f"Recorded loss={loss:.4f} accuracy={accuracy:.4f} for {label}/{transformation_label}")
        return record
