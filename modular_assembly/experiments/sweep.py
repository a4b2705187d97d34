"""Impact sweep orchestration: build a layout, strike it repeatedly, persist the logs."""

from __future__ import annotations

import logging
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from modular_assembly.assembly.session import AssemblySession
from modular_assembly.config.types import ImpactSweepConfig
from modular_assembly.io.paths import impact_cells_path, impact_summary_path, logs_dir
from modular_assembly.io.schemas import (
    IMPACT_CELL_SCHEMA,
    IMPACT_SCHEMA_VERSION,
    IMPACT_SUMMARY_SCHEMA,
)
from modular_assembly.simulation.impact import ImpactResult, apply_impact_response, simulate_impact

logger = logging.getLogger(__name__)


def _deterministic_run_id(run_index: int, target_id: int, force: float) -> str:
    """Build a reproducible run ID from the run position, strike target and force."""
    return f"r{run_index}_t{target_id}_f{force:g}"


def build_layout(config: ImpactSweepConfig) -> AssemblySession:
    """Place every layout entry in order, snapping where the structure allows."""
    session = AssemblySession(params=config.piece_params())
    first_kind, first_x, first_z = config.layout[0]
    session.place_polygon(first_kind, first_x, first_z)
    for kind, x, z in config.layout[1:]:
        session.place(x, z, kind=kind)
    return session


def _cell_rows(run_id: str, result: ImpactResult) -> dict[str, list[int | str | float]]:
    columns: dict[str, list[int | str | float]] = {f.name: [] for f in IMPACT_CELL_SCHEMA}
    for cell_id in sorted(result.cell_states):
        state = result.cell_states[cell_id]
        columns["run_id"].append(run_id)
        columns["target_id"].append(result.target_id)
        columns["cell_id"].append(cell_id)
        columns["hop"].append(state.hop)
        columns["force"].append(state.force)
        columns["displacement_mm"].append(state.displacement_mm)
        columns["energy_absorbed_uj"].append(state.energy_absorbed_uj)
        columns["energy_harvested_uj"].append(state.energy_harvested_uj)
        columns["velocity"].append(state.velocity)
        columns["mode"].append(state.mode.value)
    return columns


def run_impact_sweep(
    config: ImpactSweepConfig,
    out_dir: Path,
    session: AssemblySession | None = None,
) -> list[dict[str, int | str | float]]:
    """Strike the configured layout once per (target, force) and write Parquet logs.

    *session* is a layout already built from *config*; one is built when omitted.

    Writes ``logs/impact_cells.parquet`` (one row per reached cell per run) and
    ``logs/impact_summary.parquet`` (one row per run). Returns the summary rows.
    """
    out_dir = Path(out_dir)
    logs_dir(out_dir).mkdir(parents=True, exist_ok=True)

    if session is None:
        session = build_layout(config)
    graph = session.graph
    targets = config.targets or (graph.cells_in_order()[0].cell_id,)
    missing = [t for t in targets if t not in graph.cells]
    if missing:
        raise ValueError(f"targets not present in layout: {missing}")

    summaries: list[dict[str, int | str | float]] = []
    cell_writer: pq.ParquetWriter | None = None
    try:
        for target_id in targets:
            for force in config.forces:
                run_id = _deterministic_run_id(len(summaries), target_id, force)
                result = simulate_impact(graph, target_id, force, config.impact)
                stats = graph.stats()
                table = pa.Table.from_pydict(_cell_rows(run_id, result), schema=IMPACT_CELL_SCHEMA)
                if cell_writer is None:
                    cell_writer = pq.ParquetWriter(impact_cells_path(out_dir), IMPACT_CELL_SCHEMA)
                cell_writer.write_table(table)

                summary = result.summary
                summaries.append(
                    {
                        "schema_version": IMPACT_SCHEMA_VERSION,
                        "run_id": run_id,
                        "target_id": target_id,
                        "impact_force": summary.impact_force,
                        "affected_cells": summary.affected_cells,
                        "blast_radius": summary.blast_radius,
                        "total_energy_absorbed_uj": summary.total_energy_absorbed_uj,
                        "total_energy_harvested_uj": summary.total_energy_harvested_uj,
                        "max_displacement_mm": summary.max_displacement_mm,
                        "force_at_edge": summary.force_at_edge,
                        "spring_constant": summary.spring_constant,
                        "natural_frequency_hz": summary.natural_frequency_hz,
                        "cell_count": stats.cell_count,
                        "edge_count": stats.edge_count,
                    }
                )
                logger.info(
                    "run %s: %d cells affected, radius %d",
                    run_id,
                    summary.affected_cells,
                    summary.blast_radius,
                )
                if config.apply_response:
                    apply_impact_response(graph, target_id, summary.blast_radius)
    finally:
        if cell_writer is not None:
            cell_writer.close()

    pq.write_table(
        pa.Table.from_pylist(summaries, schema=IMPACT_SUMMARY_SCHEMA),
        impact_summary_path(out_dir),
    )
    return summaries
