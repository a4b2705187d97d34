"""Domain layer: cells, the connectivity graph, and shared magnet constants."""

from modular_assembly.domain.cell import (
    TRANSITIONS,
    Cell,
    CellSnapshot,
    Connection,
    ConnectionPoint,
    ConnectionPointOccupiedError,
    HardwareTarget,
    Mode,
    Point,
    Pose,
    SensorState,
)
from modular_assembly.domain.graph import (
    ConnectivityGraph,
    Edge,
    GraphStats,
    IdSequence,
    Polygon,
    PolygonKind,
    inscribed_radius,
)
from modular_assembly.domain.magnets import (
    DEFAULT_MAGNET_GRADE,
    MAGNET_GRADES,
    MagnetGrade,
    get_magnet_grade,
    spring_constant_for,
)

__all__ = [
    "Cell",
    "CellSnapshot",
    "Connection",
    "ConnectionPoint",
    "ConnectionPointOccupiedError",
    "ConnectivityGraph",
    "DEFAULT_MAGNET_GRADE",
    "Edge",
    "GraphStats",
    "HardwareTarget",
    "IdSequence",
    "MAGNET_GRADES",
    "MagnetGrade",
    "Mode",
    "Point",
    "Polygon",
    "PolygonKind",
    "Pose",
    "SensorState",
    "TRANSITIONS",
    "get_magnet_grade",
    "inscribed_radius",
    "spring_constant_for",
]
