"""
Append-only store of benchmark results.

Every measurement becomes one RunRecord. Stores accumulate records in
memory and persist the entire table on flush(). CsvResultsStore writes the
table to a temporary file next to the target and renames it into place, so
the results file on disk is always a complete, parseable table: a crash
loses at most the measurement in flight.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List

import pandas as pd

from .benchmark_setup import CSV_SEPARATOR

logger = logging.getLogger(__name__)

# Run key columns
KEY_COLUMNS = ["dataset", "sensitive", "model", "threshold", "transformation"]

# Measured columns
MEASURE_COLUMNS = ["quality_loss", "accuracy_lr_anon"]

RESULT_COLUMNS = KEY_COLUMNS + MEASURE_COLUMNS


@dataclass(frozen=True)
class RunRecord:
    """
    One measured transformation.

    Attributes:
        dataset: Dataset display name
        sensitive: Sensitive attribute
        model: Privacy model name
        threshold: Privacy model threshold
        transformation: Level vector, formatted as '[0, 1, 2]'
        quality_loss: Information loss of the refined output
        accuracy_lr_anon: Logistic regression accuracy on the refined output
    """
    dataset: str
    sensitive: str
    model: str
    threshold: float
    transformation: str
    quality_loss: float
    accuracy_lr_anon: float

    def to_dict(self) -> Dict:
        return asdict(self)


class ResultsStore(ABC):
    """Accumulates run records and persists them on demand."""

    def __init__(self):
        self._records: List[RunRecord] = []

    def append(self, record: RunRecord) -> None:
        self._records.append(record)

    @abstractmethod
    def flush(self) -> None:
        """Persist all accumulated records."""
        pass

    @property
    def records(self) -> List[RunRecord]:
        return list(self._records)

    def to_frame(self) -> pd.DataFrame:
        """Accumulated records as a DataFrame with the result columns."""
        return pd.DataFrame([r.to_dict() for r in self._records], columns=RESULT_COLUMNS)

    def __len__(self) -> int:
        return len(self._records)


class InMemoryResultsStore(ResultsStore):
    """
    Store that keeps every flushed table in memory.

    Attributes:
        snapshots: Table persisted by each flush, oldest first
    """

    def __init__(self):
        super().__init__()
        self.snapshots: List[pd.DataFrame] = []

    def flush(self) -> None:
        self.snapshots.append(self.to_frame())


class CsvResultsStore(ResultsStore):
    """
    Store persisted as a semicolon-separated table.

    The whole table is rewritten on every flush. Existing files are not read
    back: a new sweep starts from an empty table.

    Attributes:
        path (Path): Results file
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def flush(self) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            self.to_frame().to_csv(f, sep=CSV_SEPARATOR, index=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)

        logger.debug(f"Wrote {len(self)} records to {self.path}")


def read_results(path: str) -> pd.DataFrame:
    """Read a results table written by CsvResultsStore."""
    return pd.read_csv(path, sep=CSV_SEPARATOR, dtype={"transformation": str})
