"""Assembly session: the command surface over one connectivity graph.

The session is the command surface a front end drives. It owns the graph and
the most recent overlays (impact result, route) and hands out read-only views.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from modular_assembly.config.constants import MODE_CYCLE
from modular_assembly.config.types import ImpactParams, PieceParams
from modular_assembly.domain.cell import CellSnapshot, Mode
from modular_assembly.domain.graph import (
    ConnectivityGraph,
    Edge,
    GraphStats,
    Polygon,
    PolygonKind,
)
from modular_assembly.simulation.impact import (
    ImpactResult,
    apply_impact_response,
    simulate_impact,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssemblyView:
    """Detached state handed to rendering and inspection code."""

    cells: tuple[CellSnapshot, ...]
    edges: tuple[Edge, ...]
    polygons: tuple[Polygon, ...]
    stats: GraphStats
    impact: ImpactResult | None
    route: tuple[int, ...] | None
    selected_id: int | None


class AssemblySession:
    """Single-writer front for a ConnectivityGraph."""

    def __init__(
        self,
        params: PieceParams | None = None,
        placement_kind: PolygonKind | str = PolygonKind.HEXAGON,
    ) -> None:
        self.params = params or PieceParams()
        self.placement_kind = PolygonKind(placement_kind)
        self.graph = ConnectivityGraph()
        self.selected_id: int | None = None
        self.last_impact: ImpactResult | None = None
        self.route: list[int] | None = None

    def seed(self) -> Polygon | None:
        """Place one hexagon at the origin if the graph is empty."""
        if self.graph.cells:
            return None
        return self.graph.create_polygon(PolygonKind.HEXAGON, 0.0, 0.0, self.params)

    def reset(self) -> Polygon:
        """Discard everything and start over from a single hexagon."""
        self.graph = ConnectivityGraph()
        self.selected_id = None
        self.last_impact = None
        self.route = None
        return self.graph.create_polygon(PolygonKind.HEXAGON, 0.0, 0.0, self.params)

    # --- Placement ---

    def place(self, x: float, z: float, kind: PolygonKind | str | None = None) -> Polygon:
        """Snap a polygon onto the structure near (x, z), else place it freestanding."""
        kind = PolygonKind(kind) if kind is not None else self.placement_kind
        polygon = self.graph.snap_polygon(kind, x, z, self.params)
        if polygon is None:
            polygon = self.graph.create_polygon(kind, x, z, self.params)
        self.last_impact = None
        return polygon

    def place_polygon(self, kind: PolygonKind | str, x: float, z: float) -> Polygon:
        return self.graph.create_polygon(kind, x, z, self.params)

    # --- Inspection ---

    def select_at(self, x: float, z: float) -> int | None:
        """Select the cell nearest (x, z) within one crossbar length."""
        cell = self.graph.closest_cell(x, z, max_distance=self.params.crossbar_length)
        self.selected_id = cell.cell_id if cell is not None else None
        return self.selected_id

    def cycle_mode(self, cell_id: int) -> Mode | None:
        """Advance a cell to the next reachable mode of the user cycle."""
        cell = self.graph.get_cell(cell_id)
        if cell is None:
            return None
        cycle = [Mode(m) for m in MODE_CYCLE]
        start = cycle.index(cell.mode) if cell.mode in cycle else -1
        for offset in range(1, len(cycle) + 1):
            candidate = cycle[(start + offset) % len(cycle)]
            if candidate != cell.mode and cell.drive_to(candidate):
                return candidate
        return cell.mode

    # --- Impacts ---

    def strike(
        self, x: float, z: float, force: float, impact_params: ImpactParams | None = None
    ) -> ImpactResult | None:
        """Hit the cell nearest (x, z), then re-mode the structure around it."""
        cell = self.graph.closest_cell(x, z)
        if cell is None:
            logger.info("strike at (%.2f, %.2f) found no cells", x, z)
            return None
        return self.strike_cell(cell.cell_id, force, impact_params)

    def strike_cell(
        self, cell_id: int, force: float, impact_params: ImpactParams | None = None
    ) -> ImpactResult:
        params = impact_params or ImpactParams(crossbar_length=self.params.crossbar_length)
        result = simulate_impact(self.graph, cell_id, force, params)
        apply_impact_response(self.graph, cell_id, result.summary.blast_radius)
        self.last_impact = result
        return result

    def clear_impact(self) -> None:
        """Drop the impact overlay and return every cell to rigid."""
        self.last_impact = None
        for cell in self.graph.cells_in_order():
            if not cell.drive_to(Mode.RIGID):
                logger.warning("cell %d cannot reach rigid from %s", cell.cell_id, cell.mode.value)

    # --- Routing ---

    def show_route(self, from_id: int, to_id: int) -> list[int] | None:
        self.route = self.graph.shortest_path(from_id, to_id)
        return self.route

    def clear_route(self) -> None:
        self.route = None

    # --- Views ---

    def view(self) -> AssemblyView:
        return AssemblyView(
            cells=tuple(cell.snapshot() for cell in self.graph.cells_in_order()),
            edges=tuple(self.graph.get_edges()),
            polygons=tuple(
                Polygon(p.polygon_id, p.kind, p.center, list(p.cell_ids))
                for p in self.graph.polygons_in_order()
            ),
            stats=self.graph.stats(),
            impact=self.last_impact,
            route=tuple(self.route) if self.route is not None else None,
            selected_id=self.selected_id,
        )
