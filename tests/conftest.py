"""
Shared fixtures: a small synthetic copy of both benchmark datasets with
their hierarchies, and the in-memory engine from fake_engine.py.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from disclosure_benchmark.benchmark_setup import BenchmarkDataset, get_dataset_spec
from disclosure_benchmark.data_loader import DataLoader
from disclosure_benchmark.experiment_runner import ExperimentRunner
from disclosure_benchmark.measurement import MeasurementRecorder
from disclosure_benchmark.results_store import InMemoryResultsStore

from fake_engine import FakeEngine

N_RECORDS = 90

AGES = [str(a) for a in range(20, 60, 5)]


def _age_hierarchy():
    return [[a, f"{int(a) // 10 * 10}-{int(a) // 10 * 10 + 9}", "*"] for a in AGES]


# attribute -> hierarchy rows (column 0 holds the raw values)
CENSUS_HIERARCHIES = {
    "Sex": [["Male", "*"], ["Female", "*"]],
    "Age": _age_hierarchy(),
    "Race": [["White", "*"], ["Black", "*"], ["Asian", "*"], ["Other", "*"]],
    "Marital status": [
        ["Married", "Partnered", "*"],
        ["Single", "Unpartnered", "*"],
        ["Divorced", "Unpartnered", "*"],
        ["Widowed", "Unpartnered", "*"],
    ],
    "Education": [
        ["Primary", "School", "*"],
        ["Secondary", "School", "*"],
        ["Bachelor", "University", "*"],
        ["Master", "University", "*"],
    ],
}

HEALTH_HIERARCHIES = {
    "SEX": [["1", "*"], ["2", "*"]],
    "AGE": _age_hierarchy(),
    "RACEA": [["100", "*"], ["200", "*"], ["300", "*"], ["400", "*"]],
    "MARSTAT": [["10", "1x", "*"], ["20", "2x", "*"], ["30", "2x", "*"], ["40", "2x", "*"]],
    "EDUC": [["1", "low", "*"], ["2", "low", "*"], ["3", "high", "*"], ["4", "high", "*"]],
}


def write_dataset(base_dir: Path, dataset: BenchmarkDataset, hierarchies: dict,
                  n_records: int = N_RECORDS, seed: int = 7) -> None:
    """Write a random dataset and its hierarchy files below base_dir."""
    spec = get_dataset_spec(dataset)
    rng = np.random.RandomState(seed)

    columns = list(spec.quasi_identifiers) + list(spec.sensitive_attributes)
    frame = pd.DataFrame({
        attribute: rng.choice([row[0] for row in hierarchies[attribute]], size=n_records)
        for attribute in columns
    })

    data_path = base_dir / spec.data_path
    data_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(data_path, sep=";", index=False)

    for attribute, rows in hierarchies.items():
        path = base_dir / spec.hierarchy_path(attribute)
        path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(rows).to_csv(path, sep=";", header=False, index=False)


@pytest.fixture
def benchmark_dir(tmp_path):
    """Directory with data/ and hierarchies/ for both datasets."""
    write_dataset(tmp_path, BenchmarkDataset.CENSUS, CENSUS_HIERARCHIES)
    write_dataset(tmp_path, BenchmarkDataset.HEALTH, HEALTH_HIERARCHIES)
    return tmp_path


@pytest.fixture
def loader(benchmark_dir):
    return DataLoader(str(benchmark_dir))


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def store():
    return InMemoryResultsStore()


@pytest.fixture
def recorder(store):
    return MeasurementRecorder(store)


@pytest.fixture
def runner(loader, engine, recorder):
    return ExperimentRunner(loader, engine, recorder)
