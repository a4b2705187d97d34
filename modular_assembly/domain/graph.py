"""Connectivity graph over cells: polygons, snapping, and graph queries.

Physical connectivity is data connectivity: the neighbor records held by the
cells are the only edge store. Every traversal visits neighbors in ascending
id order and connection points in ``left, right, stem_tip`` order, so results
are reproducible for a given graph state.
"""

from __future__ import annotations

import logging
import math
from collections import Counter, deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from modular_assembly.config.constants import (
    AUTO_CONNECT_STRENGTH,
    AUTO_CONNECT_THRESHOLD_FACTOR,
    LOAD_BEARING_ROLE,
    POLYGON_LINK_STRENGTH,
    POLYGON_SIDES,
    SNAP_RADIUS_FACTOR,
)
from modular_assembly.config.types import PieceParams
from modular_assembly.domain.cell import (
    Cell,
    Connection,
    ConnectionPoint,
    Mode,
    Point,
    Pose,
    SensorState,
)

logger = logging.getLogger(__name__)


class PolygonKind(str, Enum):
    """Assembled shape; each side is one cell."""

    TRIANGLE = "triangle"
    SQUARE = "square"
    HEXAGON = "hexagon"

    @property
    def sides(self) -> int:
        return POLYGON_SIDES[self.value]


def inscribed_radius(kind: PolygonKind | str, crossbar_length: float) -> float:
    """Center-to-edge distance of a regular polygon with crossbar-length sides."""
    sides = PolygonKind(kind).sides
    return crossbar_length / (2 * math.tan(math.pi / sides))


@dataclass
class Polygon:
    """A closed cycle of cells; cell_ids[i].right links cell_ids[i+1].left."""

    polygon_id: int
    kind: PolygonKind
    center: Point
    cell_ids: list[int] = field(default_factory=list)

    @property
    def sides(self) -> int:
        return self.kind.sides


@dataclass(frozen=True)
class GraphStats:
    """Aggregate counts over the whole graph."""

    cell_count: int
    edge_count: int
    polygon_count: int
    mode_counts: Mapping[str, int]
    """Read-only mode value -> number of cells in that mode."""


Edge = tuple[int, int, Connection]
"""(lower id, higher id, connection record as stored on the lower id)."""


class IdSequence:
    """Monotonic integer ids owned by one graph."""

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def next_id(self) -> int:
        value = self._next
        self._next += 1
        return value

    def advance_past(self, value: int) -> None:
        """Guarantee every future id is greater than *value*."""
        if value >= self._next:
            self._next = value + 1


class ConnectivityGraph:
    """Owns all cells and polygons of one assembly."""

    def __init__(self) -> None:
        self.cells: dict[int, Cell] = {}
        self.polygons: dict[int, Polygon] = {}
        self._cell_ids = IdSequence()
        self._polygon_ids = IdSequence()

    # --- Cell management ---

    def add_cell(self, cell: Cell) -> Cell:
        """Insert *cell*; its id must not already be present."""
        if cell.cell_id in self.cells:
            raise ValueError(f"cell id {cell.cell_id} already present")
        self.cells[cell.cell_id] = cell
        self._cell_ids.advance_past(cell.cell_id)
        return cell

    def get_cell(self, cell_id: int) -> Cell | None:
        return self.cells.get(cell_id)

    def cells_in_order(self) -> list[Cell]:
        return [self.cells[cid] for cid in sorted(self.cells)]

    def polygons_in_order(self) -> list[Polygon]:
        return [self.polygons[pid] for pid in sorted(self.polygons)]

    def remove_cell(self, cell_id: int) -> None:
        """Remove a cell, both halves of its links, and its polygon membership."""
        cell = self.cells.get(cell_id)
        if cell is None:
            logger.debug("remove_cell: %d not present", cell_id)
            return
        for neighbor_id in cell.neighbor_ids():
            neighbor = self.cells.get(neighbor_id)
            if neighbor is not None:
                neighbor.disconnect(cell_id)
        cell.clear_links()

        if cell.polygon_id is not None:
            polygon = self.polygons.get(cell.polygon_id)
            if polygon is not None:
                polygon.cell_ids = [cid for cid in polygon.cell_ids if cid != cell_id]
                if not polygon.cell_ids:
                    del self.polygons[polygon.polygon_id]
                    logger.debug("polygon %d deleted with its last cell", polygon.polygon_id)

        del self.cells[cell_id]

    def closest_cell(
        self, x: float, z: float, max_distance: float | None = None
    ) -> Cell | None:
        """Cell whose position is nearest (x, z), optionally within max_distance."""
        best: Cell | None = None
        best_dist = math.inf
        for cell in self.cells_in_order():
            dist = math.hypot(cell.pose.x - x, cell.pose.z - z)
            if dist < best_dist and (max_distance is None or dist < max_distance):
                best = cell
                best_dist = dist
        return best

    # --- Polygon management ---

    def create_polygon(
        self, kind: PolygonKind | str, x: float, z: float, params: PieceParams
    ) -> Polygon:
        """Place a closed ring of new rigid, load-bearing cells around (x, z).

        The first cell sits at the top (+90 deg); each cell's stem points
        at the center.
        """
        kind = PolygonKind(kind)
        sides = kind.sides
        angle_step = 2 * math.pi / sides
        radius = inscribed_radius(kind, params.crossbar_length)
        stem_extension = min(
            1.0,
            max(
                0.0,
                (radius - params.stem_min_length)
                / (params.stem_max_length - params.stem_min_length),
            ),
        )

        polygon = Polygon(
            polygon_id=self._polygon_ids.next_id(),
            kind=kind,
            center=Point(x, z),
        )
        members: list[Cell] = []
        for slot in range(sides):
            angle = angle_step * slot + math.pi / 2
            cell = Cell(
                self._cell_ids.next_id(),
                mode=Mode.RIGID,
                structural_role=LOAD_BEARING_ROLE,
                sensor_state=SensorState(stem_extension=stem_extension),
                pose=Pose(
                    x=x + radius * math.cos(angle),
                    z=z + radius * math.sin(angle),
                    rotation=angle - math.pi / 2,
                ),
                polygon_id=polygon.polygon_id,
                slot_index=slot,
            )
            self.add_cell(cell)
            members.append(cell)
            polygon.cell_ids.append(cell.cell_id)

        for slot, current in enumerate(members):
            following = members[(slot + 1) % sides]
            current.connect(
                following, ConnectionPoint.RIGHT, ConnectionPoint.LEFT, POLYGON_LINK_STRENGTH
            )

        self.polygons[polygon.polygon_id] = polygon
        logger.debug(
            "created %s %d at (%.2f, %.2f) with cells %s",
            kind.value,
            polygon.polygon_id,
            x,
            z,
            polygon.cell_ids,
        )
        return polygon

    def snap_polygon(
        self, kind: PolygonKind | str, near_x: float, near_z: float, params: PieceParams
    ) -> Polygon | None:
        """Grow a new polygon off the nearest free crossbar end, then auto-connect.

        Only unoccupied left/right points within 1.5 crossbar lengths of
        (near_x, near_z) qualify. Returns None when there is none.
        """
        kind = PolygonKind(kind)
        cb = params.crossbar_length
        snap_distance = cb * SNAP_RADIUS_FACTOR

        best_cell: Cell | None = None
        best_pos: Point | None = None
        best_dist = math.inf
        for cell in self.cells_in_order():
            for point in cell.free_points():
                if point is ConnectionPoint.STEM_TIP:
                    continue
                pos = cell.connection_world_position(point, cb)
                if pos is None:
                    continue
                dist = math.hypot(pos.x - near_x, pos.z - near_z)
                if dist < best_dist and dist < snap_distance:
                    best_cell, best_pos, best_dist = cell, pos, dist

        if best_cell is None or best_pos is None:
            logger.info("snap_polygon: no free crossbar end near (%.2f, %.2f)", near_x, near_z)
            return None

        radius = inscribed_radius(kind, cb)
        outward = best_cell.pose.rotation + math.pi / 2
        cx = best_pos.x + 2 * radius * math.cos(outward)
        cz = best_pos.z + 2 * radius * math.sin(outward)
        polygon = self.create_polygon(kind, cx, cz, params)
        linked = self._auto_connect(cb)
        logger.debug(
            "snapped polygon %d onto cell %d (%d auto-links)",
            polygon.polygon_id,
            best_cell.cell_id,
            linked,
        )
        return polygon

    def _auto_connect(self, crossbar_length: float) -> int:
        """Link free points of cells in different polygons that nearly coincide.

        Quadratic in cells; intended to run once per placement. A pair that
        gets linked is not examined further. Returns the number of new links.
        """
        threshold = crossbar_length * AUTO_CONNECT_THRESHOLD_FACTOR
        cells = self.cells_in_order()
        created = 0
        for i, a in enumerate(cells):
            for b in cells[i + 1 :]:
                if b.cell_id in a.neighbors:
                    continue
                if a.polygon_id == b.polygon_id:
                    continue
                if self._link_first_close_pair(a, b, crossbar_length, threshold):
                    created += 1
        return created

    @staticmethod
    def _link_first_close_pair(a: Cell, b: Cell, crossbar_length: float, threshold: float) -> bool:
        for a_point in a.free_points():
            a_pos = a.connection_world_position(a_point, crossbar_length)
            if a_pos is None:
                continue
            for b_point in b.free_points():
                b_pos = b.connection_world_position(b_point, crossbar_length)
                if b_pos is None:
                    continue
                if math.hypot(a_pos.x - b_pos.x, a_pos.z - b_pos.z) < threshold:
                    a.connect(b, a_point, b_point, AUTO_CONNECT_STRENGTH)
                    return True
        return False

    # --- Graph queries ---

    def get_edges(self) -> list[Edge]:
        """Each undirected edge once, as (lower id, higher id, record on lower id)."""
        edges: list[Edge] = []
        for cell in self.cells_in_order():
            for neighbor_id in cell.neighbor_ids():
                if neighbor_id > cell.cell_id:
                    edges.append((cell.cell_id, neighbor_id, cell.neighbors[neighbor_id]))
        return edges

    def shortest_path(self, from_id: int, to_id: int) -> list[int] | None:
        """Fewest-hop path from from_id to to_id, inclusive; None if unreachable."""
        if from_id == to_id:
            return [from_id]
        if from_id not in self.cells or to_id not in self.cells:
            return None

        parents: dict[int, int] = {}
        visited = {from_id}
        queue = deque([from_id])
        while queue:
            current = queue.popleft()
            cell = self.cells.get(current)
            if cell is None:
                continue
            for neighbor_id in cell.neighbor_ids():
                if neighbor_id in visited:
                    continue
                visited.add(neighbor_id)
                parents[neighbor_id] = current
                if neighbor_id == to_id:
                    path = [to_id]
                    while path[-1] != from_id:
                        path.append(parents[path[-1]])
                    path.reverse()
                    return path
                queue.append(neighbor_id)
        return None

    def neighborhood(self, source_id: int, max_hops: int) -> dict[int, int]:
        """Cell id -> hop count for every cell within max_hops of source_id."""
        if source_id not in self.cells:
            return {}
        result = {source_id: 0}
        queue = deque([(source_id, 0)])
        while queue:
            current, hops = queue.popleft()
            if hops >= max_hops:
                continue
            cell = self.cells.get(current)
            if cell is None:
                continue
            for neighbor_id in cell.neighbor_ids():
                if neighbor_id in result:
                    continue
                result[neighbor_id] = hops + 1
                queue.append((neighbor_id, hops + 1))
        return result

    def stats(self) -> GraphStats:
        link_halves = sum(len(cell.neighbors) for cell in self.cells.values())
        mode_counts = Counter(cell.mode.value for cell in self.cells.values())
        return GraphStats(
            cell_count=len(self.cells),
            edge_count=link_halves // 2,
            polygon_count=len(self.polygons),
            mode_counts=MappingProxyType(dict(mode_counts)),
        )
