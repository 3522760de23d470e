"""Grid Package

This package holds the image-side data model:
- BinaryGrid and the 8-neighbourhood contour predicate
- VolumeSource for slicing label volumes into grids
"""

from .core import (
    Coordinate,
    NEIGHBOUR8_OFFSETS,
    neighbourhood8,
    BinaryGrid,
    is_contour_point,
)
from .source import (
    LITS_BACKGROUND,
    LITS_LIVER,
    LITS_TUMOR,
    InputError,
    VolumeSource,
)

__all__ = [
    "Coordinate",
    "NEIGHBOUR8_OFFSETS",
    "neighbourhood8",
    "BinaryGrid",
    "is_contour_point",
    "LITS_BACKGROUND",
    "LITS_LIVER",
    "LITS_TUMOR",
    "InputError",
    "VolumeSource",
]
