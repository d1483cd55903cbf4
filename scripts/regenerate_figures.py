#!/usr/bin/env python3
"""
Regenerate the trade-off figures from an existing results table.

Useful after an interrupted sweep: the results file is complete up to the
last measured node, so figures can be drawn from it without rerunning.

Usage:
    python scripts/regenerate_figures.py [results/results.csv] [results/figures]
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from disclosure_benchmark.results_store import read_results
from disclosure_benchmark.visualization import create_tradeoff_figures


def main():
    logging.basicConfig(level=logging.INFO)

    results_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("results/results.csv")
    figures_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("results/figures")

    if not results_path.exists():
        print(f"ERROR: {results_path} not found.")
        return 1

    results = read_results(results_path)
    print(f"Loaded {len(results)} results from {results_path}")

    paths = create_tradeoff_figures(results, str(figures_dir))

    for name, files in paths.items():
        print(f"  {name}: {', '.join(files)}")

    print("\nFigures regenerated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
