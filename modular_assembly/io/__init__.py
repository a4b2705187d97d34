"""I/O layer: Parquet schemas and output path conventions."""

from modular_assembly.io.paths import impact_cells_path, impact_summary_path, logs_dir
from modular_assembly.io.schemas import (
    IMPACT_CELL_SCHEMA,
    IMPACT_SCHEMA_VERSION,
    IMPACT_SUMMARY_SCHEMA,
)

__all__ = [
    "IMPACT_CELL_SCHEMA",
    "IMPACT_SCHEMA_VERSION",
    "IMPACT_SUMMARY_SCHEMA",
    "impact_cells_path",
    "impact_summary_path",
    "logs_dir",
]
