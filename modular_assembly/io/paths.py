"""Path construction helpers for impact-sweep output directories."""

from __future__ import annotations

from pathlib import Path


def logs_dir(out_dir: Path) -> Path:
    """Return path to the logs subdirectory within an output directory."""
    return out_dir / "logs"


def impact_cells_path(out_dir: Path) -> Path:
    """Return path to the per-cell impact log Parquet file."""
    return logs_dir(out_dir) / "impact_cells.parquet"


def impact_summary_path(out_dir: Path) -> Path:
    """Return path to the per-run impact summary Parquet file."""
    return logs_dir(out_dir) / "impact_summary.parquet"
