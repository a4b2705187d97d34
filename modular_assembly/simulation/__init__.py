"""Simulation layer: impact propagation and the mode-response policy."""

from modular_assembly.simulation.impact import (
    CellImpactState,
    ImpactResult,
    ImpactStep,
    ImpactSummary,
    apply_impact_response,
    simulate_impact,
)

__all__ = [
    "CellImpactState",
    "ImpactResult",
    "ImpactStep",
    "ImpactSummary",
    "apply_impact_response",
    "simulate_impact",
]
