"""
Information loss quality model shared by all benchmark runs.

The anonymization engine reports per-cell granularity for a materialized
output (0 = original value, 1 = fully generalized or suppressed). LossMetric
reduces that table to a single loss value: the mean granularity of every
quasi-identifier, aggregated across quasi-identifiers with the configured
aggregate function.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, TYPE_CHECKING

import numpy as np
import pandas as pd

from .exceptions import MeasurementError

if TYPE_CHECKING:
    from .anonymization_engine import DataHandle

logger = logging.getLogger(__name__)


class AggregateFunction(Enum):
    """Aggregation of per-attribute loss into a single value."""

    ARITHMETIC_MEAN = "arithmetic_mean"

    def aggregate(self, values: np.ndarray) -> float:
        if self is AggregateFunction.ARITHMETIC_MEAN:
            return float(np.mean(values))
        raise ValueError(f"Unknown aggregate function: {self!r}")


@dataclass(frozen=True)
class LossMetric:
    """
    Granularity-based loss metric.

    Attributes:
        gs_factor: Weight of generalization vs. suppression in the engine's
                   search objective (0 = only the loss counts)
        aggregate_function: Aggregation across quasi-identifiers
    """
    gs_factor: float = 0.0
    aggregate_function: AggregateFunction = AggregateFunction.ARITHMETIC_MEAN

    def per_attribute(self, granularity: pd.DataFrame, attributes: List[str]) -> pd.Series:
        """Mean granularity of each attribute."""
        missing = [a for a in attributes if a not in granularity.columns]
        if missing:
            raise MeasurementError(f"No granularity reported for {missing}")
        return granularity[attributes].astype(float).mean(axis=0)

    def evaluate(self, output: "DataHandle", attributes: List[str]) -> float:
        """
        Compute the loss of a materialized output.

        Args:
            output: Materialized transformation output
            attributes: Quasi-identifiers entering the loss

        Returns:
            Aggregated loss in [0, 1]

        Raises:
            MeasurementError: empty output or non-finite granularity
        """
        granularity = output.granularity()
        if granularity.empty:
            raise MeasurementError("Granularity of an empty output is undefined")

        values = self.per_attribute(granularity, attributes).to_numpy()
        if not np.all(np.isfinite(values)):
            raise MeasurementError(f"Non-finite granularity: {values.tolist()}")

        return self.aggregate_function.aggregate(values)
