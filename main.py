#!/usr/bin/env python3
"""
main.py - Batch entry point of the attribute disclosure benchmark.

Runs the complete sweep (privacy model x dataset x sensitive attribute x
threshold) and writes one row per lattice node to the results table.

Usage:
    python main.py

The run takes no arguments. Paths, the anonymization engine and logging are
read from config/benchmark.yaml.
"""

import logging
import sys
import time
from pathlib import Path
from datetime import datetime

import yaml

# Import local modules
from disclosure_benchmark.benchmark_setup import RESULTS_FILENAME
from disclosure_benchmark.classification import LogisticRegressionClassifier
from disclosure_benchmark.data_loader import DataLoader
from disclosure_benchmark.anonymization_engine import load_engine
from disclosure_benchmark.measurement import MeasurementRecorder
from disclosure_benchmark.results_store import CsvResultsStore
from disclosure_benchmark.experiment_runner import (
    ExperimentRunner,
    enumerate_parameter_space,
    validate_parameter_space,
)
from disclosure_benchmark.visualization import create_tradeoff_figures

CONFIG_PATH = Path("config/benchmark.yaml")


def setup_logging(log_level: str = "INFO", log_file: str = None) -> None:
    """Configure logging for the application."""
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def load_config(config_path: Path = CONFIG_PATH) -> dict:
    """Load configuration from YAML file. A missing file yields an empty config."""
    if not Path(config_path).exists():
        return {}
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def run_benchmark(config: dict) -> dict:
    """
    Run the complete benchmark sweep.

    Args:
        config: Parsed configuration (see config/benchmark.yaml)

    Returns:
        Dict with the sweep report
    """
    start_time = time.time()
    logger = logging.getLogger(__name__)

    paths = config.get('paths', {})
    engine_config = config.get('engine', {})
    sweep_config = config.get('sweep', {})

    results_file = paths.get('results_file', RESULTS_FILENAME)
    report_file = Path(paths.get('report_file', 'results/sweep_report.yaml'))

    # Step 1: Validate the static tables before anything runs
    n_tuples = validate_parameter_space()
    logger.info(f"Parameter space: {n_tuples} tuples")

    # Step 2: Wire up collaborators
    loader = DataLoader(paths.get('base_dir', '.'))
    engine = load_engine(engine_config.get('factory'), engine_config.get('options'))
    classifier = LogisticRegressionClassifier(
        random_state=config.get('classification', {}).get('random_state', 42)
    )
    store = CsvResultsStore(results_file)
    recorder = MeasurementRecorder(store, classifier)
    runner = ExperimentRunner(loader, engine, recorder)

    # Step 3: Run the sweep
    logger.info("Running benchmark sweep...")
    summary = runner.run_sweep(
        enumerate_parameter_space(),
        show_progress=sweep_config.get('show_progress', True)
    )

    # Step 4: Figures
    figure_paths = {}
    if sweep_config.get('figures', True) and len(store) > 0:
        logger.info("Generating trade-off figures...")
        figure_paths = create_tradeoff_figures(
            store.to_frame(), paths.get('figures_dir', 'results/figures')
        )

    # Step 5: Report
    elapsed_time = time.time() - start_time

    report = {
        'analysis_timestamp': datetime.now().isoformat(),
        'elapsed_time_seconds': elapsed_time,
        'results_file': str(results_file),
        'n_tuples': summary.n_tuples,
        'n_completed': summary.n_completed,
        'n_aborted': summary.n_aborted,
        'records_written': summary.records_written,
        'aborted_tuples': [o.to_dict() for o in summary.aborted],
        'figure_paths': figure_paths,
    }

    report_file.parent.mkdir(parents=True, exist_ok=True)
    with open(report_file, 'w') as f:
        yaml.dump(report, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Benchmark complete in {elapsed_time:.1f} seconds")
    logger.info(f"Results saved to: {results_file}")

    # Print summary
    print("\n" + "=" * 60)
    print("BENCHMARK SUMMARY")
    print("=" * 60)
    print(f"Parameter tuples:   {summary.n_tuples}")
    print(f"Completed:          {summary.n_completed}")
    print(f"Aborted:            {summary.n_aborted}")
    print(f"Records written:    {summary.records_written}")

    for outcome in summary.aborted:
        print(f"\n  ABORTED {outcome.params.label}")
        print(f"    - {outcome.error_type}: {outcome.error}")

    print(f"\nResults file: {results_file}")
    print("=" * 60)

    return report


def main() -> int:
    """Main entry point. Takes no command-line arguments."""
    config = load_config()

    log_config = config.get('logging', {})
    setup_logging(log_config.get('level', 'INFO'), log_config.get('file', 'results/benchmark.log'))

    try:
        run_benchmark(config)
        return 0
    except Exception as e:
        logging.error(f"Benchmark failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
