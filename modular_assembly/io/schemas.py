"""Parquet schema definitions for impact-sweep artifacts.

Every Arrow schema used when persisting impact runs is centralised here so
that the engine and its readers work against the same column contracts.
"""

from __future__ import annotations

import pyarrow as pa

IMPACT_SCHEMA_VERSION = 1

IMPACT_CELL_SCHEMA = pa.schema(
    [
        ("run_id", pa.string()),
        ("target_id", pa.int64()),
        ("cell_id", pa.int64()),
        ("hop", pa.int64()),
        ("force", pa.float64()),
        ("displacement_mm", pa.float64()),
        ("energy_absorbed_uj", pa.float64()),
        ("energy_harvested_uj", pa.float64()),
        ("velocity", pa.float64()),
        ("mode", pa.string()),
    ]
)

IMPACT_SUMMARY_SCHEMA = pa.schema(
    [
        ("schema_version", pa.int64()),
        ("run_id", pa.string()),
        ("target_id", pa.int64()),
        ("impact_force", pa.float64()),
        ("affected_cells", pa.int64()),
        ("blast_radius", pa.int64()),
        ("total_energy_absorbed_uj", pa.float64()),
        ("total_energy_harvested_uj", pa.float64()),
        ("max_displacement_mm", pa.float64()),
        ("force_at_edge", pa.float64()),
        ("spring_constant", pa.float64()),
        ("natural_frequency_hz", pa.float64()),
        ("cell_count", pa.int64()),
        ("edge_count", pa.int64()),
    ]
)
