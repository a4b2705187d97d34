"""CLI entrypoint for impact sweeps.

This module owns CLI argument parsing and dispatch. All domain logic lives in
the extracted modules:

- ``modular_assembly.config``             – configuration dataclasses and presets
- ``modular_assembly.domain``             – cells and the connectivity graph
- ``modular_assembly.simulation``         – impact propagation and response
- ``modular_assembly.experiments.sweep``  – layout building and Parquet logs
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from modular_assembly.config.constants import POLYGON_SIDES
from modular_assembly.config.types import (
    PIECE_PRESETS,
    ImpactParams,
    ImpactSweepConfig,
    Placement,
    get_preset,
)
from modular_assembly.domain.magnets import DEFAULT_MAGNET_GRADE, MAGNET_GRADES
from modular_assembly.experiments.sweep import build_layout, run_impact_sweep
from modular_assembly.logging_config import setup_logging
from modular_assembly.metrics.structure import structure_summary

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "hexagon@0,0"
DEFAULT_FORCES = "1,5,20"

# ---------------------------------------------------------------------------
# CLI parsing helpers
# ---------------------------------------------------------------------------


def _parse_layout(raw_layout: object) -> tuple[Placement, ...]:
    """Parse ``kind@x,z;kind@x,z`` (or a JSON list of [kind, x, z]) into placements."""
    if isinstance(raw_layout, list):
        entries = raw_layout
    elif isinstance(raw_layout, str):
        entries = [part.strip() for part in raw_layout.split(";") if part.strip()]
    else:
        raise ValueError("layout must be a string or a list")
    if not entries:
        raise ValueError("layout must not be empty")

    placements: list[Placement] = []
    for entry in entries:
        if isinstance(entry, str):
            kind, sep, coords = entry.partition("@")
            tokens = coords.split(",") if sep else []
            if len(tokens) != 2:
                raise ValueError("layout entries must use kind@x,z format")
            raw_x, raw_z = tokens
        elif isinstance(entry, (list, tuple)) and len(entry) == 3:
            kind, raw_x, raw_z = entry
        else:
            raise ValueError("layout entries must be kind@x,z strings or [kind, x, z] lists")
        kind = str(kind).strip().lower()
        if kind not in POLYGON_SIDES:
            valid = ", ".join(POLYGON_SIDES)
            raise ValueError(f"layout kinds must be one of {valid}")
        placements.append((kind, _coerce_float(raw_x, "layout x"), _coerce_float(raw_z, "layout z")))
    return tuple(placements)


def _parse_positive_float_csv(raw_values: object, label: str) -> tuple[float, ...]:
    """Parse comma-delimited (or listed) positive floats."""
    parts = raw_values if isinstance(raw_values, list) else str(raw_values).split(",")
    values: list[float] = []
    for part in parts:
        if isinstance(part, str) and not part.strip():
            continue
        value = _coerce_float(part, label)
        if value <= 0:
            raise ValueError(f"{label} values must be > 0")
        values.append(value)
    if not values:
        raise ValueError(f"{label} must not be empty")
    return tuple(values)


def _parse_int_csv(raw_values: object, label: str) -> tuple[int, ...]:
    """Parse comma-delimited (or listed) integers; empty input gives ()."""
    parts = raw_values if isinstance(raw_values, list) else str(raw_values).split(",")
    return tuple(
        _coerce_int(part, label) for part in parts if not (isinstance(part, str) and not part.strip())
    )


_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


def _coerce_bool(raw: object, key: str) -> bool:
    """Accept real booleans and the usual on/off words only."""
    if isinstance(raw, bool):
        return raw
    word = raw.strip().lower() if isinstance(raw, str) else None
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"{key} must be a boolean value")


def _coerce_int(raw: object, key: str) -> int:
    """Integers, integral floats, and numeric strings; never booleans."""
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, (int, str)) and not isinstance(raw, bool):
        try:
            return int(raw)
        except ValueError:
            pass
    raise ValueError(f"{key} must be an integer value, got {raw!r}")


def _coerce_float(raw: object, key: str) -> float:
    if isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
        try:
            return float(raw)
        except ValueError:
            pass
    raise ValueError(f"{key} must be a float value, got {raw!r}")


def _coerce_str(raw: object, key: str) -> str:
    if isinstance(raw, (str, Path)):
        return str(raw)
    raise ValueError(f"{key} must be a string value, got {raw!r}")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """Resolve one setting: the CLI value wins, then the config file, then *default*."""
    return cli_val if cli_val is not None else file_cfg.get(key, default)


def _get_bool(cli_val: bool | None, key: str, file_cfg: dict[str, object], default: bool) -> bool:
    return _coerce_bool(_get_val(cli_val, key, file_cfg, default), key)


def _get_int(cli_val: int | None, key: str, file_cfg: dict[str, object], default: int) -> int:
    return _coerce_int(_get_val(cli_val, key, file_cfg, default), key)


def _get_float(
    cli_val: float | None, key: str, file_cfg: dict[str, object], default: float
) -> float:
    return _coerce_float(_get_val(cli_val, key, file_cfg, default), key)


def _get_str(cli_val: object, key: str, file_cfg: dict[str, object], default: str) -> str:
    return _coerce_str(_get_val(cli_val, key, file_cfg, default), key)


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Strike a modular T-piece assembly")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--preset", type=str, choices=sorted(PIECE_PRESETS), default=None)
    parser.add_argument(
        "--layout",
        type=str,
        default=None,
        help="Placements as kind@x,z separated by ';' (first is freestanding)",
    )
    parser.add_argument("--forces", type=str, default=None, help="Comma-separated forces (N)")
    parser.add_argument("--targets", type=str, default=None, help="Comma-separated cell ids")
    parser.add_argument("--attenuation", type=float, default=None)
    parser.add_argument("--max-hops", type=int, default=None)
    parser.add_argument("--cell-mass", type=float, default=None, help="Cell mass (kg)")
    parser.add_argument("--magnet-grade", type=str, choices=sorted(MAGNET_GRADES), default=None)
    parser.add_argument("--apply-response", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--out-dir", type=Path, default=None)
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
    )
    return parser


def _resolve_config(args: argparse.Namespace, file_cfg: dict[str, object]) -> ImpactSweepConfig:
    preset = _get_str(args.preset, "preset", file_cfg, "tabletop")
    impact = ImpactParams(
        crossbar_length=get_preset(preset).crossbar_length,
        magnet_grade=_get_str(args.magnet_grade, "magnet_grade", file_cfg, DEFAULT_MAGNET_GRADE),
        attenuation_per_hop=_get_float(args.attenuation, "attenuation_per_hop", file_cfg, 0.7),
        max_hops=_get_int(args.max_hops, "max_hops", file_cfg, 10),
        cell_mass=_get_float(args.cell_mass, "cell_mass", file_cfg, 0.5e-3),
    )
    return ImpactSweepConfig(
        layout=_parse_layout(_get_val(args.layout, "layout", file_cfg, DEFAULT_LAYOUT)),
        preset=preset,
        forces=_parse_positive_float_csv(
            _get_val(args.forces, "forces", file_cfg, DEFAULT_FORCES), "forces"
        ),
        targets=_parse_int_csv(_get_val(args.targets, "targets", file_cfg, ""), "targets"),
        impact=impact,
        apply_response=_get_bool(args.apply_response, "apply_response", file_cfg, False),
    )


# ---------------------------------------------------------------------------
# Main CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for impact sweeps.

    Supports ``--config path/to/config.json`` for reproducibility. CLI
    arguments override config-file values; config-file values override
    built-in defaults.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")
        if not isinstance(file_cfg, dict):
            parser.error(f"Config file must hold a JSON object: {args.config}")

    try:
        setup_logging(_get_str(args.log_level, "log_level", file_cfg, "WARNING").upper())
        config = _resolve_config(args, file_cfg)
        out_dir = Path(_get_str(args.out_dir, "out_dir", file_cfg, "data"))
        session = build_layout(config)
        structure = structure_summary(session.graph)
        rows = run_impact_sweep(config, out_dir, session=session)
    except ValueError as exc:
        parser.error(str(exc))
    logger.info("impact sweep finished: %d runs written under %s", len(rows), out_dir)

    summary = {
        "preset": config.preset,
        "placements": len(config.layout),
        "runs": len(rows),
        "structure": structure,
        "max_blast_radius": max(int(row["blast_radius"]) for row in rows),
        "total_energy_harvested_uj": sum(float(row["total_energy_harvested_uj"]) for row in rows),
        "out_dir": str(out_dir),
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
