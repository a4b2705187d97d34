"""Runtime state for a single T-piece cell in the assembly.

Each cell holds the full nine-attribute coordinate (mode, neighbor links,
sensor state, autonomy level, structural role, force ownership, hardware
class, hardware target) together with its top-down pose and three named
connection points.

Link invariant: ``a.neighbors[b.cell_id]`` exists iff ``b.neighbors[a.cell_id]``
exists, and the two records carry mirrored local/remote points. A connection
point is occupied iff exactly one neighbor record uses it as its local point.
"""

from __future__ import annotations

import copy
import logging
import math
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from modular_assembly.config.constants import (
    CONNECTION_POINT_ORDER,
    DEFAULT_AUTONOMY,
    DEFAULT_FORCE_OWNERSHIP,
    DEFAULT_HARDWARE_CLASS,
    DEFAULT_MAGNET_SIZE_MM,
    DEFAULT_PROCESSOR,
    DEFAULT_ROLE,
    DEFAULT_STEM_EXTENSION,
    DEFAULT_TEMPERATURE_C,
    STEM_HEX_FACTOR,
)
from modular_assembly.domain.magnets import DEFAULT_MAGNET_GRADE

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Behavioral mode of a cell."""

    RIGID = "rigid"
    FLEX = "flex"
    RELAY_RECEIVE = "relay-receive"
    RELAY_PASS = "relay-pass"
    ATTRACT_HOME = "attract-home"
    RELEASE = "release"
    IN_TRANSIT = "in-transit"
    HARVEST = "harvest"
    SENSE = "sense"
    IDLE = "idle"


TRANSITIONS: Mapping[Mode, frozenset[Mode]] = MappingProxyType(
    {
        Mode.RIGID: frozenset(
            {Mode.FLEX, Mode.RELAY_RECEIVE, Mode.RELAY_PASS, Mode.RELEASE, Mode.HARVEST, Mode.SENSE}
        ),
        Mode.FLEX: frozenset(
            {Mode.RIGID, Mode.RELAY_RECEIVE, Mode.RELAY_PASS, Mode.RELEASE, Mode.SENSE}
        ),
        Mode.RELAY_RECEIVE: frozenset({Mode.RIGID, Mode.FLEX, Mode.RELAY_PASS}),
        Mode.RELAY_PASS: frozenset({Mode.RIGID, Mode.FLEX, Mode.RELAY_RECEIVE}),
        Mode.ATTRACT_HOME: frozenset({Mode.RIGID, Mode.FLEX}),
        Mode.RELEASE: frozenset({Mode.IN_TRANSIT, Mode.IDLE}),
        Mode.IN_TRANSIT: frozenset({Mode.ATTRACT_HOME, Mode.IDLE}),
        Mode.HARVEST: frozenset({Mode.RIGID, Mode.RELEASE}),
        Mode.SENSE: frozenset({Mode.RIGID, Mode.FLEX, Mode.RELEASE}),
        Mode.IDLE: frozenset({Mode.ATTRACT_HOME, Mode.IN_TRANSIT}),
    }
)
"""Mode -> modes reachable in one transition. Read-only."""


class ConnectionPoint(str, Enum):
    """Named attachment slots on a cell."""

    LEFT = "left"
    RIGHT = "right"
    STEM_TIP = "stem_tip"


class Point(NamedTuple):
    """Top-down world position (mm)."""

    x: float
    z: float


class ConnectionPointOccupiedError(ValueError):
    """Raised when a link would reuse an occupied point or duplicate a link."""


@dataclass
class Pose:
    """World position and rotation about the vertical axis (radians)."""

    x: float = 0.0
    z: float = 0.0
    rotation: float = 0.0

    @property
    def position(self) -> Point:
        return Point(self.x, self.z)


@dataclass
class SensorState:
    """Free-form telemetry; only stem_extension feeds the geometry."""

    stem_extension: float = DEFAULT_STEM_EXTENSION
    strain: float = 0.0
    temperature: float = DEFAULT_TEMPERATURE_C
    field_strength: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    """Field readings at left, right, and stem tip."""


@dataclass
class HardwareTarget:
    """Hardware the cell is built from; selects simulation constants."""

    processor: str = DEFAULT_PROCESSOR
    magnet_grade: str = DEFAULT_MAGNET_GRADE
    magnet_size: float = DEFAULT_MAGNET_SIZE_MM


@dataclass(frozen=True)
class Connection:
    """One half of a symmetric link, stored on the cell that owns local_point."""

    cell_id: int
    local_point: ConnectionPoint
    remote_point: ConnectionPoint
    strength: float


@dataclass(frozen=True)
class CellSnapshot:
    """Detached copy of a cell's coordinate and pose for external readers."""

    cell_id: int
    mode: Mode
    neighbors: tuple[Connection, ...]
    sensor_state: SensorState
    autonomy_level: str
    structural_role: str
    force_ownership: str
    hardware_class: str
    hardware_target: HardwareTarget
    pose: Pose
    polygon_id: int | None
    slot_index: int


def _coerce_mode(value: Mode | str) -> Mode | None:
    try:
        return Mode(value)
    except ValueError:
        return None


def _coerce_point(value: ConnectionPoint | str) -> ConnectionPoint | None:
    try:
        return ConnectionPoint(value)
    except ValueError:
        return None


class Cell:
    """A single modular unit: mode machine, links, and physical placement."""

    def __init__(
        self,
        cell_id: int,
        *,
        mode: Mode | str = Mode.IDLE,
        sensor_state: SensorState | None = None,
        autonomy_level: str = DEFAULT_AUTONOMY,
        structural_role: str = DEFAULT_ROLE,
        hardware_class: str = DEFAULT_HARDWARE_CLASS,
        hardware_target: HardwareTarget | None = None,
        pose: Pose | None = None,
        polygon_id: int | None = None,
        slot_index: int = -1,
    ) -> None:
        self.cell_id = cell_id
        self._mode = Mode(mode)
        self._mode_history: list[Mode] = [self._mode]
        self._neighbors: dict[int, Connection] = {}
        self._points: dict[ConnectionPoint, int | None] = {p: None for p in ConnectionPoint}
        self._force_ownership = DEFAULT_FORCE_OWNERSHIP
        self.sensor_state = sensor_state if sensor_state is not None else SensorState()
        self.autonomy_level = autonomy_level
        self.structural_role = structural_role
        self.hardware_class = hardware_class
        self.hardware_target = hardware_target if hardware_target is not None else HardwareTarget()
        self.pose = pose if pose is not None else Pose()
        self.polygon_id = polygon_id
        self.slot_index = slot_index

    def __repr__(self) -> str:
        return (
            f"Cell(cell_id={self.cell_id}, mode={self._mode.value!r}, "
            f"neighbors={sorted(self._neighbors)}, polygon_id={self.polygon_id})"
        )

    # --- Read-only views ---

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def mode_history(self) -> tuple[Mode, ...]:
        """Every mode held since creation, oldest first."""
        return tuple(self._mode_history)

    @property
    def force_ownership(self) -> str:
        return self._force_ownership

    @property
    def neighbors(self) -> Mapping[int, Connection]:
        return MappingProxyType(self._neighbors)

    @property
    def connection_points(self) -> Mapping[ConnectionPoint, int | None]:
        """Point -> id of the neighbor occupying it, or None."""
        return MappingProxyType(self._points)

    def neighbor_ids(self) -> list[int]:
        """Neighbor ids in ascending order (the traversal order everywhere)."""
        return sorted(self._neighbors)

    def is_occupied(self, point: ConnectionPoint | str) -> bool:
        return self._points[ConnectionPoint(point)] is not None

    def free_points(self) -> list[ConnectionPoint]:
        """Unoccupied points in scan order."""
        scan = (ConnectionPoint(name) for name in CONNECTION_POINT_ORDER)
        return [p for p in scan if self._points[p] is None]

    # --- Mode machine ---

    def can_transition(self, target: Mode | str) -> bool:
        """True iff *target* is one table edge away from the current mode."""
        mode = _coerce_mode(target)
        return mode is not None and mode in TRANSITIONS[self._mode]

    def transition(self, target: Mode | str) -> bool:
        """Apply the transition if legal. Returns False and changes nothing otherwise."""
        if not self.can_transition(target):
            logger.debug("cell %d refused %s -> %s", self.cell_id, self._mode.value, target)
            return False
        self._mode = Mode(target)
        self._mode_history.append(self._mode)
        return True

    def transition_path(self, target: Mode | str) -> list[Mode] | None:
        """Shortest chain of legal transitions ending in *target*.

        Returns [] when already in *target* and None when it is unreachable.
        Candidates are explored in Mode declaration order.
        """
        goal = _coerce_mode(target)
        if goal is None:
            return None
        if goal == self._mode:
            return []
        parents: dict[Mode, Mode] = {}
        queue = deque([self._mode])
        seen = {self._mode}
        while queue:
            current = queue.popleft()
            for candidate in Mode:
                if candidate not in TRANSITIONS[current] or candidate in seen:
                    continue
                parents[candidate] = current
                if candidate == goal:
                    path = [candidate]
                    while path[-1] in parents and parents[path[-1]] != self._mode:
                        path.append(parents[path[-1]])
                    path.reverse()
                    return path
                seen.add(candidate)
                queue.append(candidate)
        return None

    def drive_to(self, target: Mode | str) -> bool:
        """Reach *target* through legal transitions only. False if unreachable."""
        path = self.transition_path(target)
        if path is None:
            return False
        for mode in path:
            self.transition(mode)
        return True

    # --- Geometry ---

    def connection_world_position(
        self, point: ConnectionPoint | str, crossbar_length: float
    ) -> Point | None:
        """Project a connection point through the pose. None for unknown names."""
        name = _coerce_point(point)
        if name is None:
            return None
        half = crossbar_length / 2
        if name is ConnectionPoint.LEFT:
            lx, lz = -half, 0.0
        elif name is ConnectionPoint.RIGHT:
            lx, lz = half, 0.0
        else:
            stem_length = self.sensor_state.stem_extension * crossbar_length * STEM_HEX_FACTOR
            lx, lz = 0.0, -stem_length
        cos = math.cos(self.pose.rotation)
        sin = math.sin(self.pose.rotation)
        return Point(
            self.pose.x + lx * cos - lz * sin,
            self.pose.z + lx * sin + lz * cos,
        )

    # --- Links ---

    def connect(
        self,
        other: Cell,
        my_point: ConnectionPoint | str,
        their_point: ConnectionPoint | str,
        strength: float = 1.0,
    ) -> None:
        """Install both halves of a link and occupy both points.

        Raises ConnectionPointOccupiedError if either point is taken or the
        cells are already linked; nothing is modified in that case.
        """
        mine = ConnectionPoint(my_point)
        theirs = ConnectionPoint(their_point)
        if other is self or other.cell_id == self.cell_id:
            raise ValueError(f"cell {self.cell_id} cannot connect to itself")
        if not 0.0 < strength <= 1.0:
            raise ValueError("strength must be in (0.0, 1.0]")
        if other.cell_id in self._neighbors or self.cell_id in other._neighbors:
            raise ConnectionPointOccupiedError(
                f"cells {self.cell_id} and {other.cell_id} are already linked"
            )
        if self._points[mine] is not None:
            raise ConnectionPointOccupiedError(
                f"cell {self.cell_id} point {mine.value} is occupied by {self._points[mine]}"
            )
        if other._points[theirs] is not None:
            raise ConnectionPointOccupiedError(
                f"cell {other.cell_id} point {theirs.value} is occupied by {other._points[theirs]}"
            )
        self._neighbors[other.cell_id] = Connection(other.cell_id, mine, theirs, strength)
        self._points[mine] = other.cell_id
        other._neighbors[self.cell_id] = Connection(self.cell_id, theirs, mine, strength)
        other._points[theirs] = self.cell_id

    def disconnect(self, other_id: int) -> None:
        """Drop this cell's half of the link to *other_id*; no-op if absent.

        The other cell keeps its half; callers restore symmetry by
        disconnecting both sides.
        """
        conn = self._neighbors.pop(other_id, None)
        if conn is None:
            return
        self._points[conn.local_point] = None

    def clear_links(self) -> None:
        """Drop every local link half and free all points."""
        self._neighbors.clear()
        for point in self._points:
            self._points[point] = None

    # --- Export ---

    def snapshot(self) -> CellSnapshot:
        """Detached copy of the coordinate; never shares containers with the cell."""
        return CellSnapshot(
            cell_id=self.cell_id,
            mode=self._mode,
            neighbors=tuple(self._neighbors[n] for n in sorted(self._neighbors)),
            sensor_state=copy.deepcopy(self.sensor_state),
            autonomy_level=self.autonomy_level,
            structural_role=self.structural_role,
            force_ownership=self._force_ownership,
            hardware_class=self.hardware_class,
            hardware_target=copy.deepcopy(self.hardware_target),
            pose=copy.deepcopy(self.pose),
            polygon_id=self.polygon_id,
            slot_index=self.slot_index,
        )
