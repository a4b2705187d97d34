"""Assembly layer: the session object that drives one structure."""

from modular_assembly.assembly.session import AssemblySession, AssemblyView

__all__ = ["AssemblySession", "AssemblyView"]
