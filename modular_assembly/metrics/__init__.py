"""Metrics layer: structural analysis of an assembly graph."""

from modular_assembly.metrics.structure import structure_summary, to_networkx

__all__ = ["structure_summary", "to_networkx"]
