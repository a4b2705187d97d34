"""Configuration dataclasses for piece geometry, impacts, and impact sweeps.

All frozen dataclasses that parameterise polygon placement, impact
simulation, and sweep runs live here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from modular_assembly.config.constants import POLYGON_SIDES

__all__ = [
    "ImpactParams",
    "ImpactSweepConfig",
    "PIECE_PRESETS",
    "PieceParams",
    "get_preset",
]

# ---------------------------------------------------------------------------
# Piece geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PieceParams:
    """Physical dimensions of one T-piece (all lengths in mm)."""

    crossbar_length: float = 25.0
    crossbar_width: float = 3.0
    crossbar_thickness: float = 2.0
    stem_min_length: float = 5.0
    stem_max_length: float = 22.0
    stem_width: float = 2.5
    magnet_diameter: float = 3.0
    magnet_depth: float = 1.5

    def __post_init__(self) -> None:
        for name in (
            "crossbar_length",
            "crossbar_width",
            "crossbar_thickness",
            "stem_width",
            "magnet_diameter",
            "magnet_depth",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        if self.stem_min_length < 0:
            raise ValueError("stem_min_length must be >= 0")
        if self.stem_max_length <= self.stem_min_length:
            raise ValueError("stem_max_length must be > stem_min_length")


PIECE_PRESETS: dict[str, PieceParams] = {
    "proof": PieceParams(
        crossbar_length=50.0,
        crossbar_width=5.0,
        crossbar_thickness=3.0,
        stem_min_length=10.0,
        stem_max_length=44.0,
        stem_width=4.0,
        magnet_diameter=5.0,
        magnet_depth=2.0,
    ),
    "tabletop": PieceParams(),
    "wearable": PieceParams(
        crossbar_length=12.0,
        crossbar_width=2.0,
        crossbar_thickness=1.5,
        stem_min_length=3.0,
        stem_max_length=11.0,
        stem_width=1.8,
        magnet_diameter=2.0,
        magnet_depth=1.0,
    ),
    "arm": PieceParams(
        crossbar_length=6.0,
        crossbar_width=1.2,
        crossbar_thickness=1.0,
        stem_min_length=1.5,
        stem_max_length=5.5,
        stem_width=1.0,
        magnet_diameter=1.5,
        magnet_depth=0.8,
    ),
}
"""Named piece scales, from the 50 mm proof print down to the 6 mm arm."""


def get_preset(name: str) -> PieceParams:
    """Return the named piece preset; raise ValueError on unknown names."""
    try:
        return PIECE_PRESETS[name]
    except KeyError as exc:
        valid = ", ".join(sorted(PIECE_PRESETS))
        raise ValueError(f"preset must be one of {valid}") from exc


# ---------------------------------------------------------------------------
# Impact simulation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImpactParams:
    """Runtime knobs for one impact simulation."""

    crossbar_length: float = 25.0
    magnet_grade: str = "N42"
    attenuation_per_hop: float = 0.7
    """Fraction of force retained across one hop, before edge strength."""
    max_hops: int = 10
    cell_mass: float = 0.5e-3
    """Mass of one cell (kg)."""

    def __post_init__(self) -> None:
        if self.crossbar_length <= 0:
            raise ValueError("crossbar_length must be > 0")
        if not 0.0 < self.attenuation_per_hop < 1.0:
            raise ValueError("attenuation_per_hop must be in (0.0, 1.0)")
        if self.max_hops < 0:
            raise ValueError("max_hops must be >= 0")
        if self.cell_mass <= 0:
            raise ValueError("cell_mass must be > 0")


Placement = tuple[str, float, float]
"""(polygon kind, x, z) request handed to the assembly session."""


@dataclass(frozen=True)
class ImpactSweepConfig:
    """Settings for a batch of impacts against one assembled layout."""

    layout: tuple[Placement, ...] = (("hexagon", 0.0, 0.0),)
    preset: str = "tabletop"
    forces: tuple[float, ...] = (1.0, 5.0, 20.0)
    targets: tuple[int, ...] = ()
    """Cell ids to strike; empty means the first cell of the layout."""
    impact: ImpactParams = field(default_factory=ImpactParams)
    apply_response: bool = False

    def __post_init__(self) -> None:
        if not self.layout:
            raise ValueError("layout must not be empty")
        for kind, _, _ in self.layout:
            if kind not in POLYGON_SIDES:
                valid = ", ".join(POLYGON_SIDES)
                raise ValueError(f"layout kinds must be one of {valid}")
        get_preset(self.preset)
        if not self.forces:
            raise ValueError("forces must not be empty")
        if any(f <= 0 for f in self.forces):
            raise ValueError("forces must be > 0")
        if abs(get_preset(self.preset).crossbar_length - self.impact.crossbar_length) > 1e-9:
            raise ValueError("impact.crossbar_length conflicts with preset crossbar_length")

    def piece_params(self) -> PieceParams:
        return get_preset(self.preset)
