"""Experiments layer: impact sweeps over assembled layouts and their CLI."""

from modular_assembly.experiments.cli import main
from modular_assembly.experiments.sweep import build_layout, run_impact_sweep

__all__ = ["build_layout", "main", "run_impact_sweep"]
