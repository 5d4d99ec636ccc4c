"""
Integration tests for the complete evaluation workflow:
tables -> alignment -> per-station statistics -> report on disk, and the command line.
"""

import numpy as np
import pandas as pd
import pytest

from hydro_evaluation.cli import main
from hydro_evaluation.config import EvaluationConfig
from hydro_evaluation.evaluation.engine import RESULT_COLUMNS
from hydro_evaluation.evaluation.report import read_report
from hydro_evaluation.exceptions import DestinationExistsError, InsufficientHistoryError, SchemaMismatchError
from hydro_evaluation.run import evaluate_tables, run_evaluation


class TestRunEvaluation:
    """Test run_evaluation end to end."""

    def test_report_written(self, observed_table, simulated_table, evaluation_config, station_ids, date_range):
        path = run_evaluation(observed_table, simulated_table, evaluation_config)

        assert path == evaluation_config.output_root / "results_calib" / "hbv_v1.txt"
        metadata, results = read_report(path)
        assert metadata.model_name == "hbv"
        assert metadata.description == "Lumped HBV with default parameters"
        assert metadata.start == date_range[1095]
        assert metadata.end == date_range[-1]
        assert list(results.columns) == RESULT_COLUMNS
        assert results["Station"].tolist() == station_ids

    def test_report_matches_evaluate_tables(self, observed_table, simulated_table, evaluation_config, stub_benchmark):
        path = run_evaluation(observed_table, simulated_table, evaluation_config, benchmark=stub_benchmark)
        _, written = read_report(path)
        _, computed = evaluate_tables(observed_table, simulated_table, benchmark=stub_benchmark)
        pd.testing.assert_frame_equal(written, computed, check_dtype=False)

    def test_second_run_fails_and_keeps_report(self, observed_table, simulated_table, evaluation_config):
        path = run_evaluation(observed_table, simulated_table, evaluation_config)
        original = path.read_bytes()

        with pytest.raises(DestinationExistsError):
            run_evaluation(observed_table, simulated_table.copy(), evaluation_config)
        assert path.read_bytes() == original

    def test_new_version_gets_own_report(self, observed_table, simulated_table, evaluation_config, temp_dir):
        run_evaluation(observed_table, simulated_table, evaluation_config)
        config_v2 = EvaluationConfig(model_name="hbv", model_version="v2", output_root=temp_dir)
        path = run_evaluation(observed_table, simulated_table, config_v2)
        assert path.name == "hbv_v2.txt"

    def test_schema_mismatch_writes_nothing(self, observed_table, simulated_table, evaluation_config, station_ids):
        reordered = simulated_table[["Time"] + list(reversed(station_ids))]
        with pytest.raises(SchemaMismatchError):
            run_evaluation(observed_table, reordered, evaluation_config)
        assert not any(evaluation_config.output_root.rglob("*.txt"))

    def test_short_history_writes_nothing(self, observed_table, simulated_table, evaluation_config):
        with pytest.raises(InsufficientHistoryError):
            run_evaluation(observed_table.iloc[:900], simulated_table.iloc[:900], evaluation_config)
        assert not any(evaluation_config.output_root.rglob("*.txt"))

    def test_degenerate_station_reported_as_na(self, observed_table, simulated_table, evaluation_config, station_ids):
        observed = observed_table.copy()
        observed[station_ids[2]] = np.nan
        path = run_evaluation(observed, simulated_table, evaluation_config)

        text = path.read_text(encoding="utf-8")
        last_row = text.rstrip("\n").split("\n")[-1].split("\t")
        assert last_row[0] == station_ids[2]
        assert set(last_row[1:]) == {"NA"}


class TestCommandLine:
    """Test the hydro-evaluation command."""

    @pytest.fixture
    def inputs(self, temp_dir, observed_table, simulated_table):
        observed_path = temp_dir / "q_obs.csv"
        simulated_path = temp_dir / "q_sim.csv"
        observed_table.to_csv(observed_path, index=False, date_format="%Y-%m-%d")
        simulated_table.to_csv(simulated_path, index=False, date_format="%Y-%m-%d")
        config_path = temp_dir / "evaluation.yaml"
        config_path.write_text(
            "model_name: hbv\n"
            "model_version: v1\n"
            "model_description: Lumped HBV\n"
            "period: calib\n"
            f"output_root: {temp_dir / 'out'}\n",
            encoding="utf-8",
        )
        return observed_path, simulated_path, config_path

    def test_cli_writes_report_once(self, inputs, temp_dir, station_ids):
        observed_path, simulated_path, config_path = inputs
        argv = ["--observed", str(observed_path), "--simulated", str(simulated_path), "--config", str(config_path)]

        assert main(argv) == 0
        report = temp_dir / "out" / "results_calib" / "hbv_v1.txt"
        _, results = read_report(report)
        assert results["Station"].tolist() == station_ids

        assert main(argv) == 1

    def test_cli_overrides(self, inputs, temp_dir):
        observed_path, simulated_path, config_path = inputs
        argv = [
            "--observed",
            str(observed_path),
            "--simulated",
            str(simulated_path),
            "--config",
            str(config_path),
            "--model_version",
            "v7",
            "--period",
            "validation",
        ]
        assert main(argv) == 0
        assert (temp_dir / "out" / "results_valid" / "hbv_v7.txt").exists()
