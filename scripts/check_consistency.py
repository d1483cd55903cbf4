#!/usr/bin/env python3
"""
Consistency checker for benchmark results.

Verifies that the results table is well-formed: expected header, one row
per run key, finite non-negative metrics and canonical level vectors.
Run this after any sweep, or after an interrupted one.

Usage:
    python scripts/check_consistency.py [results/results.csv]
"""

import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from disclosure_benchmark.display_utils import format_transformation, parse_transformation
from disclosure_benchmark.results_store import (
    KEY_COLUMNS,
    MEASURE_COLUMNS,
    RESULT_COLUMNS,
    read_results,
)


def check_results(path: Path) -> list:
    """Return a list of problems found in a results table."""
    errors = []

    results = read_results(path)

    if list(results.columns) != RESULT_COLUMNS:
        return [f"Unexpected header: {list(results.columns)}"]

    duplicated = results[results.duplicated(subset=KEY_COLUMNS, keep=False)]
    if len(duplicated) > 0:
        errors.append(f"{len(duplicated)} rows share a run key")

    for column in MEASURE_COLUMNS:
        values = results[column].astype(float)
        if not np.all(np.isfinite(values)):
            errors.append(f"{column}: non-finite values")
        if (values < 0).any():
            errors.append(f"{column}: negative values")

    for transformation in results['transformation']:
        try:
            canonical = format_transformation(parse_transformation(transformation))
        except ValueError:
            errors.append(f"Malformed transformation: {transformation!r}")
            continue
        if canonical != transformation:
            errors.append(f"Non-canonical transformation: {transformation!r}")

    return errors


def main():
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("results/results.csv")

    if not path.exists():
        print(f"ERROR: {path} not found. Run the benchmark first.")
        return 1

    print("=" * 60)
    print("CONSISTENCY CHECK")
    print("=" * 60)

    errors = check_results(path)
    results = read_results(path)

    for (dataset, model), group in results.groupby(['dataset', 'model']):
        print(f"\n{dataset} / {model}:")
        print(f"  Rows: {len(group)}")
        print(f"  Thresholds: {sorted(group['threshold'].unique().tolist())}")

    print("\n" + "=" * 60)

    if errors:
        print("ERRORS FOUND:")
        for e in errors:
            print(f"  - {e}")
        return 1
    else:
        print("All consistency checks passed.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
