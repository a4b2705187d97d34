"""Configuration layer: constants and typed config dataclasses."""

from modular_assembly.config.constants import (
    AUTO_CONNECT_STRENGTH,
    AUTO_CONNECT_THRESHOLD_FACTOR,
    CONNECTION_POINT_ORDER,
    DISPLACEMENT_CAP_M,
    HARVEST_FRACTION,
    IMPACT_FREQUENCY_HZ,
    POLYGON_LINK_STRENGTH,
    POLYGON_SIDES,
    PROPAGATION_CUTOFF_N,
    SNAP_RADIUS_FACTOR,
)
from modular_assembly.config.types import (
    PIECE_PRESETS,
    ImpactParams,
    ImpactSweepConfig,
    PieceParams,
    get_preset,
)

__all__ = [
    "AUTO_CONNECT_STRENGTH",
    "AUTO_CONNECT_THRESHOLD_FACTOR",
    "CONNECTION_POINT_ORDER",
    "DISPLACEMENT_CAP_M",
    "HARVEST_FRACTION",
    "IMPACT_FREQUENCY_HZ",
    "ImpactParams",
    "ImpactSweepConfig",
    "PIECE_PRESETS",
    "POLYGON_LINK_STRENGTH",
    "POLYGON_SIDES",
    "PROPAGATION_CUTOFF_N",
    "PieceParams",
    "SNAP_RADIUS_FACTOR",
    "get_preset",
]
