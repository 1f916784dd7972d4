"""Tests for the command-line entry point."""

import json

import pytest

from enhancement_core import configuration_to_mapping
from enhancement_core.cli import (
    EXIT_INVALID_INPUT,
    EXIT_OK,
    build_configuration,
    main,
    parse_args,
)


class TestBuildConfiguration:
    """Tests for turning arguments into a configuration."""

    def test_level_defaults(self):
        """Without overrides the level picks the stage count."""
        config = build_configuration(parse_args(["--level", "20"]))
        assert config.stage_count == 5
        assert config.stage_probabilities == (0.2,) * 5

    def test_single_probability_is_broadcast(self):
        """One probability applies to every stage."""
        config = build_configuration(parse_args(["--stages", "2", "--stage-prob", "0.5"]))
        assert config.stage_probabilities == (0.5, 0.5)

    def test_stage_count_change_resizes_defaults(self):
        """Changing only the stage count pads the existing probabilities."""
        config = build_configuration(parse_args(["--level", "12", "--stages", "5"]))
        assert config.stage_count == 5
        assert len(config.stage_probabilities) == 5

    def test_overrides(self):
        """Explicit options replace the defaults."""
        args = parse_args(
            [
                "--stages", "2",
                "--stage-prob", "0.3,0.4",
                "--final-prob", "0.1",
                "--cost", "50",
                "--stage-pity", "2",
                "--final-pity", "3",
                "--reset-pity-on-fail",
            ]
        )
        config = build_configuration(args)
        assert config.stage_probabilities == (0.3, 0.4)
        assert config.final_probability == 0.1
        assert config.cost_per_attempt == 50
        assert config.stage_pity_threshold == 2
        assert config.final_pity_threshold == 3
        assert config.reset_all_stage_pity_on_any_failure is True

    def test_preset_file_without_name_exits(self, tmp_path, capsys):
        """A preset file alone is rejected instead of being ignored."""
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["--preset-file", str(tmp_path / "presets.json")])
        assert excinfo.value.code == 2
        assert "--preset-file requires --preset" in capsys.readouterr().err

    def test_unparseable_probability_exits(self):
        """Malformed probability lists are argparse errors."""
        with pytest.raises(SystemExit):
            parse_args(["--stage-prob", "high"])


class TestMain:
    """Tests for main."""

    def test_diagnostics_pass(self, capsys):
        """The self-tests exit with success and print one line each."""
        assert main(["--diagnostics"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.count("[PASS]") == 5

    def test_diagnostics_json(self, capsys):
        """Diagnostics can be printed as JSON."""
        assert main(["--diagnostics", "--format", "json"]) == EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert all(item["passed"] for item in payload)

    def test_json_batch(self, capsys):
        """A batch prints its full result as JSON."""
        code = main(["--stages", "3", "--trials", "100", "--seed", "7", "--format", "json"])
        assert code == EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["trial_count"] == 100
        assert payload["seed"] == 7
        assert payload["config"]["stage_count"] == 3
        assert sum(item["count"] for item in payload["full_run"]["histogram"]) == 100

    def test_table_batch(self, capsys):
        """The default format prints text tables."""
        assert main(["--trials", "100"]) == EXIT_OK
        assert "Summary" in capsys.readouterr().out

    def test_probability_count_mismatch(self, capsys):
        """A probability list of the wrong length is rejected."""
        code = main(["--stages", "3", "--stage-prob", "0.1,0.2", "--trials", "100"])
        assert code == EXIT_INVALID_INPUT
        assert "stage_probabilities" in capsys.readouterr().err

    def test_invalid_trial_count(self, capsys):
        """Zero trials is rejected."""
        assert main(["--trials", "0"]) == EXIT_INVALID_INPUT
        assert "trial_count" in capsys.readouterr().err

    def test_non_terminating(self, capsys):
        """An impossible configuration reports an error instead of hanging."""
        code = main(
            ["--stages", "2", "--stage-prob", "0", "--reset-pity-on-fail", "--trials", "100"]
        )
        assert code == EXIT_INVALID_INPUT
        assert "never terminate" in capsys.readouterr().err

    def test_preset_file(self, tmp_path, capsys, certain_config):
        """Named presets are loaded from a JSON file."""
        path = tmp_path / "presets.json"
        path.write_text(json.dumps({"sure": configuration_to_mapping(certain_config)}), encoding="utf-8")
        code = main(
            ["--preset-file", str(path), "--preset", "sure", "--trials", "100", "--format", "json"]
        )
        assert code == EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["full_run"]["attempts"]["mean"] == 4.0
        assert payload["stages_only"]["attempts"]["p99"] == 3.0

    def test_missing_preset(self, tmp_path, capsys):
        """An unknown preset name is an input error."""
        assert main(["--preset-file", str(tmp_path / "none.json"), "--preset", "x"]) == EXIT_INVALID_INPUT
        assert "not found" in capsys.readouterr().err
