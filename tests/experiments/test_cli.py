"""Tests for experiments/cli.py: argument resolution and end-to-end runs."""

from __future__ import annotations

import json
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from modular_assembly.experiments.cli import (
    _coerce_bool,
    _coerce_int,
    _coerce_str,
    _get_bool,
    _get_float,
    _get_int,
    _parse_int_csv,
    _parse_layout,
    _parse_positive_float_csv,
    main,
)


class TestParsers:
    def test_parse_layout_string(self) -> None:
        assert _parse_layout("hexagon@0,0; triangle@-30,5.5") == (
            ("hexagon", 0.0, 0.0),
            ("triangle", -30.0, 5.5),
        )

    def test_parse_layout_list(self) -> None:
        assert _parse_layout([["Square", 1, 2]]) == (("square", 1.0, 2.0),)

    @pytest.mark.parametrize("raw", ["", "pentagon@0,0", "hexagon", "hexagon@1", []])
    def test_parse_layout_rejects(self, raw: object) -> None:
        with pytest.raises(ValueError, match="layout"):
            _parse_layout(raw)

    def test_parse_forces(self) -> None:
        assert _parse_positive_float_csv("1, 2.5,", "forces") == (1.0, 2.5)
        assert _parse_positive_float_csv([3, 4.0], "forces") == (3.0, 4.0)
        with pytest.raises(ValueError, match="forces values must be > 0"):
            _parse_positive_float_csv("1,-2", "forces")
        with pytest.raises(ValueError, match="forces must not be empty"):
            _parse_positive_float_csv("", "forces")

    def test_parse_targets(self) -> None:
        assert _parse_int_csv("", "targets") == ()
        assert _parse_int_csv("3,1", "targets") == (3, 1)
        assert _parse_int_csv([2], "targets") == (2,)

    def test_coerce_bool(self) -> None:
        assert _coerce_bool("yes", "flag") is True
        assert _coerce_bool(False, "flag") is False
        with pytest.raises(ValueError, match="flag"):
            _coerce_bool("maybe", "flag")

    def test_coerce_int_rejects_fractional(self) -> None:
        assert _coerce_int(4.0, "max_hops") == 4
        with pytest.raises(ValueError, match="max_hops"):
            _coerce_int(4.5, "max_hops")
        with pytest.raises(ValueError, match="max_hops"):
            _coerce_int(True, "max_hops")


    def test_getters_resolve_cli_then_file_then_default(self) -> None:
        file_cfg: dict[str, object] = {"max_hops": 3, "cell_mass": "0.001", "apply_response": "on"}
        assert _get_int(5, "max_hops", file_cfg, 10) == 5
        assert _get_int(None, "max_hops", file_cfg, 10) == 3
        assert _get_int(None, "max_hops", {}, 10) == 10
        assert _get_float(None, "cell_mass", file_cfg, 0.5e-3) == 0.001
        assert _get_bool(None, "apply_response", file_cfg, False) is True
        assert _get_bool(False, "apply_response", file_cfg, True) is False

    def test_coerce_str_rejects_non_strings(self) -> None:
        assert _coerce_str(Path("out"), "out_dir") == "out"
        with pytest.raises(ValueError, match="out_dir"):
            _coerce_str(True, "out_dir")

    def test_config_file_type_errors_reported(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"max_hops": 2.5, "out_dir": str(tmp_path)}))
        with pytest.raises(SystemExit):
            main(["--config", str(config_path)])


class TestMain:
    def test_defaults_run_end_to_end(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["--out-dir", str(tmp_path), "--forces", "2,4"])
        summary = json.loads(capsys.readouterr().out)
        assert summary["preset"] == "tabletop"
        assert summary["runs"] == 2
        assert summary["placements"] == 1
        assert summary["max_blast_radius"] == 3
        assert summary["structure"]["n_components"] == 1
        assert (tmp_path / "logs" / "impact_cells.parquet").exists()
        assert pq.read_table(tmp_path / "logs" / "impact_summary.parquet").num_rows == 2

    def test_config_file_values(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps(
                {
                    "layout": [["triangle", 0, 0]],
                    "forces": [3],
                    "magnet_grade": "N52",
                    "apply_response": True,
                    "out_dir": str(tmp_path / "run"),
                }
            )
        )
        main(["--config", str(config_path)])
        summary = json.loads(capsys.readouterr().out)
        assert summary["runs"] == 1
        table = pq.read_table(tmp_path / "run" / "logs" / "impact_summary.parquet")
        assert table.column("spring_constant").to_pylist() == [20000.0]
        assert table.column("cell_count").to_pylist() == [3]

    def test_cli_overrides_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"forces": "3", "out_dir": str(tmp_path)}))
        main(["--config", str(config_path), "--forces", "1,2,3"])
        assert json.loads(capsys.readouterr().out)["runs"] == 3

    def test_proof_preset(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["--out-dir", str(tmp_path), "--preset", "proof", "--forces", "1"])
        assert json.loads(capsys.readouterr().out)["preset"] == "proof"

    def test_missing_config_file(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--config", str(tmp_path / "absent.json")])

    def test_invalid_json(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text("{not json")
        with pytest.raises(SystemExit):
            main(["--config", str(config_path)])

    def test_bad_layout_reported(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["--out-dir", str(tmp_path), "--layout", "pentagon@0,0"])
        assert "layout kinds" in capsys.readouterr().err

    def test_missing_target_reported(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["--out-dir", str(tmp_path), "--targets", "42"])
        assert "targets not present" in capsys.readouterr().err
