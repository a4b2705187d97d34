"""Centralized domain constants for the assembly model and impact simulator.

All magic numbers that appear across multiple modules are defined here.
Consuming modules should import from this module rather than defining
their own inline literals.
"""

from __future__ import annotations

CONNECTION_POINT_ORDER: tuple[str, ...] = ("left", "right", "stem_tip")
"""Enumeration order of a cell's connection points in every scan."""

POLYGON_SIDES: dict[str, int] = {"triangle": 3, "square": 4, "hexagon": 6}
"""Number of cells (one per edge) in each assembled shape."""

POLYGON_LINK_STRENGTH = 0.9
"""Strength of the links closing a freshly created polygon."""

AUTO_CONNECT_STRENGTH = 0.8
"""Strength of links made by the proximity auto-connect pass."""

AUTO_CONNECT_THRESHOLD_FACTOR = 0.3
"""Auto-connect distance threshold as a fraction of crossbar length."""

SNAP_RADIUS_FACTOR = 1.5
"""Snap search radius as a multiple of crossbar length."""

STEM_HEX_FACTOR = 0.866
"""Stem length normalisation: full extension equals a hexagon's inscribed radius."""

DISPLACEMENT_CAP_M = 2e-3
"""Maximum spring displacement of a single cell (m)."""

HARVEST_FRACTION = 0.02
"""Fraction of absorbed elastic energy recovered by the coil."""

IMPACT_FREQUENCY_HZ = 100.0
"""Assumed excitation frequency used to turn displacement into velocity."""

PROPAGATION_CUTOFF_N = 0.01
"""Attenuated force below which the wave stops spreading (10 mN)."""

RESPONSE_EXTRA_HOPS = 3
"""Hops beyond the blast radius that the mode response still touches."""

RESPONSE_INNER_RING = 2
"""Outermost hop of the flexing inner ring around an impact."""

DEFAULT_STEM_EXTENSION = 0.5
DEFAULT_TEMPERATURE_C = 25.0
DEFAULT_AUTONOMY = "directed"
DEFAULT_ROLE = "reserve"
DEFAULT_FORCE_OWNERSHIP = "idle"
DEFAULT_HARDWARE_CLASS = "bare"
DEFAULT_PROCESSOR = "esp32c3"
DEFAULT_MAGNET_SIZE_MM = 3.0

LOAD_BEARING_ROLE = "load-bearing"
"""Structural role given to polygon members and the braced impact rings."""

MODE_CYCLE: tuple[str, ...] = ("rigid", "flex", "harvest", "sense", "idle")
"""Modes visited, in order, when a user cycles a single cell."""
