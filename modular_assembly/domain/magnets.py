"""Neodymium magnet grades shared by every subsystem that needs magnet physics.

The spring constant is the linearised stiffness of a magnet pair at contact
(k = |dF/dd| of the dipole force), tabulated per grade for the default 3 mm
magnet so that the impact simulator and any force-curve tooling read the
same numbers.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MagnetGrade:
    """Material figures for one magnet grade."""

    name: str
    remanence_t: float
    max_temp_c: float
    spring_constant: float
    """Contact stiffness of a connected magnet pair (N/m)."""


MAGNET_GRADES: dict[str, MagnetGrade] = {
    grade.name: grade
    for grade in (
        MagnetGrade("N35", remanence_t=1.19, max_temp_c=80.0, spring_constant=12_000.0),
        MagnetGrade("N42", remanence_t=1.30, max_temp_c=80.0, spring_constant=16_200.0),
        MagnetGrade("N48", remanence_t=1.38, max_temp_c=80.0, spring_constant=18_100.0),
        MagnetGrade("N52", remanence_t=1.45, max_temp_c=60.0, spring_constant=20_000.0),
    )
}

DEFAULT_MAGNET_GRADE = "N42"
"""Grade assumed when a requested grade is not in the table."""


def get_magnet_grade(name: str) -> MagnetGrade | None:
    """Return the grade record, or None for an unknown grade name."""
    return MAGNET_GRADES.get(name)


def spring_constant_for(name: str) -> float:
    """Return the spring constant for *name*, defaulting to the mid grade."""
    grade = MAGNET_GRADES.get(name, MAGNET_GRADES[DEFAULT_MAGNET_GRADE])
    return grade.spring_constant
