#!/usr/bin/env python3
"""
Tests for parameter space enumeration and the lattice traversal of a run.

The runner is exercised against the in-memory engine from fake_engine.py
on synthetic copies of both datasets (12-node lattices).
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from disclosure_benchmark.benchmark_setup import (
    BenchmarkDataset,
    PrivacyModel,
    get_dataset_spec,
)
from disclosure_benchmark.data_loader import AttributeType
from disclosure_benchmark.display_utils import parse_transformation
from disclosure_benchmark.exceptions import ConfigurationError, InvalidAttributeError
from disclosure_benchmark.experiment_runner import (
    ExperimentRunner,
    ParameterTuple,
    enumerate_parameter_space,
    validate_parameter_space,
)
from disclosure_benchmark.measurement import MeasurementRecorder
from disclosure_benchmark.privacy_models import KAnonymity
from disclosure_benchmark.results_store import CsvResultsStore, read_results

from fake_engine import FakeEngine

CENSUS = BenchmarkDataset.CENSUS
HEALTH = BenchmarkDataset.HEALTH


class MutatingEngine(FakeEngine):
    """Engine that overwrites the records it is given."""

    def anonymize(self, data, config):
        data.frame["Sex"] = "*"
        return super().anonymize(data, config)


CENSUS_K = ParameterTuple(PrivacyModel.K_ANONYMITY, CENSUS, "Marital status", 5.0)
HEALTH_T = ParameterTuple(PrivacyModel.T_CLOSENESS, HEALTH, "MARSTAT", 0.6)


class TestParameterSpace:
    """Enumeration of (model, dataset, attribute, threshold) tuples."""

    def test_count(self):
        tuples = list(enumerate_parameter_space())
        # K: 4, T: 4 x 5, B: 4 x 6, L: 5 + 14 + 8 + 14
        assert len(tuples) == 89
        assert validate_parameter_space() == 89
        assert len(set(tuples)) == 89

    def test_nesting_order(self):
        tuples = list(enumerate_parameter_space())

        assert tuples[0] == CENSUS_K
        assert tuples[1] == ParameterTuple(PrivacyModel.K_ANONYMITY, CENSUS, "Education", 5.0)
        assert tuples[2].dataset is HEALTH
        assert tuples[4] == ParameterTuple(PrivacyModel.T_CLOSENESS, CENSUS, "Marital status", 1.0)
        assert tuples[-1] == ParameterTuple(PrivacyModel.DISTINCT_L_DIVERSITY, HEALTH, "EDUC", 25.0)

        model_order = []
        for params in tuples:
            if params.model not in model_order:
                model_order.append(params.model)
        assert model_order == list(PrivacyModel)

    def test_enumeration_is_lazy(self):
        space = enumerate_parameter_space()
        assert next(space) == CENSUS_K

    def test_restricted_space(self):
        tuples = list(enumerate_parameter_space([PrivacyModel.T_CLOSENESS], [HEALTH]))
        assert len(tuples) == 10
        assert {p.attribute for p in tuples} == {"MARSTAT", "EDUC"}

    def test_missing_thresholds(self, monkeypatch):
        monkeypatch.setattr("disclosure_benchmark.experiment_runner.get_thresholds", lambda *args: [])
        with pytest.raises(ConfigurationError):
            validate_parameter_space()

    def test_label(self):
        assert HEALTH_T.label == "Health interviews/MARSTAT/T_CLOSENESS/0.6"


class TestLatticeTraversal:
    """Every node of the lattice is measured exactly once, level by level."""

    def test_every_node_recorded_once(self, runner, engine, store):
        outcome = runner.run(CENSUS_K)

        assert outcome.completed
        assert outcome.n_nodes == 12
        assert outcome.records_written == 12
        assert len(store) == 12

        lattice = engine.results[0].lattice
        recorded = [parse_transformation(r.transformation) for r in store.records]
        assert len(set(recorded)) == 12
        assert set(recorded) == {n.transformation for n in lattice.iter_nodes()}

        print(f"\n  ✓ {len(store)} nodes recorded once each")

    def test_levels_ascend(self, runner, store):
        runner.run(CENSUS_K)
        totals = [sum(parse_transformation(r.transformation)) for r in store.records]
        assert totals == sorted(totals)
        assert totals[0] == 0 and totals[-1] == 4

    def test_engine_order_within_level(self, loader, store):
        engine = FakeEngine(reverse_within_level=True)
        runner = ExperimentRunner(loader, engine, MeasurementRecorder(store))
        runner.run(CENSUS_K)

        level_one = [r.transformation for r in store.records[1:4]]
        assert level_one == ["[1, 0, 0]", "[0, 1, 0]", "[0, 0, 1]"]

    def test_outputs_released_and_refined(self, runner, engine):
        runner.run(CENSUS_K)

        outputs = engine.results[0].outputs
        assert len(outputs) == 12
        assert all(o.released for o in outputs)
        assert all(o.optimized_with == [pytest.approx(0.01)] for o in outputs)

    def test_one_flush_per_record(self, runner, store):
        runner.run(CENSUS_K)
        assert [len(s) for s in store.snapshots] == list(range(1, 13))


class TestRunScenarios:
    """Configuration handed to the engine, and the rows it produces."""

    def test_census_k_anonymity(self, runner, engine, store):
        runner.run(CENSUS_K)

        data, config = engine.calls[0]
        assert config.criteria == [KAnonymity(5)]
        assert config.suppression_limit == pytest.approx(0.99)
        assert data.definition.quasi_identifiers == ["Sex", "Age", "Race"]
        assert data.definition.get_attribute_type("Marital status") is AttributeType.INSENSITIVE
        assert data.definition.response_variable == "Marital status"

        for record in store.records:
            assert (record.dataset, record.sensitive, record.model, record.threshold) == \
                ("Census", "Marital status", "K_ANONYMITY", 5.0)
            assert 0.0 <= record.quality_loss <= 1.0
            assert 0.0 <= record.accuracy_lr_anon <= 1.0

        assert store.records[0].quality_loss == 0.0
        assert store.records[-1].quality_loss == 1.0

    def test_health_t_closeness(self, runner, engine, store):
        outcome = runner.run(HEALTH_T)

        data, config = engine.calls[0]
        assert config.models == [PrivacyModel.T_CLOSENESS, PrivacyModel.K_ANONYMITY]
        assert config.criteria[0].t == 0.6
        assert config.criteria[0].hierarchy.attribute == "MARSTAT"
        assert config.criteria[1] == KAnonymity(5)
        assert data.definition.sensitive_attributes == ["MARSTAT"]

        assert outcome.records_written == 12
        assert {r.dataset for r in store.records} == {"Health interviews"}
        assert {r.threshold for r in store.records} == {0.6}

    def test_invalid_attribute_propagates(self, runner, engine, store):
        params = ParameterTuple(PrivacyModel.DISTINCT_L_DIVERSITY, CENSUS, "Race", 2.0)

        with pytest.raises(InvalidAttributeError):
            runner.run(params)

        assert engine.calls == []
        assert len(store) == 0

    def test_non_positive_local_iterations(self, loader, engine, recorder):
        with pytest.raises(ConfigurationError):
            ExperimentRunner(loader, engine, recorder, local_iterations=0)


class TestAbortedRuns:
    """Tuple-fatal failures abort one tuple and keep earlier rows."""

    def test_engine_failure(self, loader, store):
        runner = ExperimentRunner(loader, FakeEngine(fail_anonymize=True), MeasurementRecorder(store))
        outcome = runner.run(CENSUS_K)

        assert not outcome.completed
        assert outcome.error_type == "EngineError"
        assert outcome.n_nodes is None
        assert outcome.records_written == 0
        assert len(store) == 0

    def test_materialization_failure_keeps_prior_rows(self, loader, store):
        engine = FakeEngine(fail_materialize_at=[0, 1, 0])
        runner = ExperimentRunner(loader, engine, MeasurementRecorder(store))
        outcome = runner.run(CENSUS_K)

        assert outcome.error_type == "EngineError"
        assert outcome.failed_transformation == "[0, 1, 0]"
        assert outcome.records_written == 2
        assert [r.transformation for r in store.records] == ["[0, 0, 0]", "[0, 0, 1]"]
        assert all(o.released for o in engine.results[0].outputs)

    def test_optimization_failure_releases_output(self, loader, store):
        engine = FakeEngine(fail_optimize_at=[1, 0, 0])
        runner = ExperimentRunner(loader, engine, MeasurementRecorder(store))
        outcome = runner.run(CENSUS_K)

        assert not outcome.completed
        assert outcome.records_written == 3
        outputs = engine.results[0].outputs
        assert outputs[-1].node.transformation == (1, 0, 0)
        assert all(o.released for o in outputs)

    def test_results_file_survives_abort(self, loader, tmp_path):
        path = tmp_path / "out" / "results.csv"
        store = CsvResultsStore(str(path))
        runner = ExperimentRunner(loader, FakeEngine(fail_materialize_at=[1, 0, 0]),
                                  MeasurementRecorder(store))
        runner.run(CENSUS_K)

        table = read_results(str(path))
        assert table["transformation"].tolist() == ["[0, 0, 0]", "[0, 0, 1]", "[0, 1, 0]"]

    def test_sweep_continues_after_abort(self, benchmark_dir, loader, engine, store, runner):
        (benchmark_dir / get_dataset_spec(HEALTH).hierarchy_path("AGE")).unlink()

        summary = runner.run_sweep([HEALTH_T, CENSUS_K], show_progress=False)

        assert summary.n_tuples == 2
        assert summary.n_aborted == 1
        assert summary.n_completed == 1
        assert summary.aborted[0].params == HEALTH_T
        assert summary.aborted[0].error_type == "HierarchyLoadError"
        assert summary.records_written == 12
        assert len(engine.calls) == 1
        assert {r.dataset for r in store.records} == {"Census"}

        frame = summary.to_frame()
        assert frame["completed"].tolist() == [False, True]

    def test_output_failure_aborts_only_its_tuple(self, loader, store):
        engine = FakeEngine(fail_granularity=True)
        runner = ExperimentRunner(loader, engine, MeasurementRecorder(store))
        census_education = ParameterTuple(PrivacyModel.K_ANONYMITY, CENSUS, "Education", 5.0)

        summary = runner.run_sweep([CENSUS_K, census_education], show_progress=False)

        assert summary.n_tuples == 2
        assert len(engine.calls) == 2
        assert [o.error_type for o in summary.outcomes] == ["MeasurementError", "MeasurementError"]
        assert [o.failed_transformation for o in summary.outcomes] == ["[0, 0, 0]", "[0, 0, 0]"]
        assert all(o.released for r in engine.results for o in r.outputs)
        assert len(store) == 0

    def test_engine_writes_do_not_leak_into_later_tuples(self, loader, store):
        engine = MutatingEngine()
        runner = ExperimentRunner(loader, engine, MeasurementRecorder(store))

        runner.run(CENSUS_K)

        assert set(loader.load_data(CENSUS).frame["Sex"]) == {"Male", "Female"}

    def test_configuration_error_stops_sweep(self, runner, store):
        bad = ParameterTuple(PrivacyModel.T_CLOSENESS, CENSUS, "Income", 0.2)
        with pytest.raises(InvalidAttributeError):
            runner.run_sweep([CENSUS_K, bad, HEALTH_T], show_progress=False)
        assert len(store) == 12
