"""Binary grid representation for a single image slice.

A ``BinaryGrid`` holds a read-only dense foreground/background mask plus a
sparse membership index of its foreground coordinates. Extractors query
the sparse index, so their cost follows the foreground size rather than
the slice area.
"""

import logging
from typing import Iterable, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

# Row/column offsets of the 8-neighbourhood, row-major order.
NEIGHBOUR8_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


def neighbourhood8(coord: Coordinate) -> Tuple[Coordinate, ...]:
    """Return the 8 coordinates surrounding ``coord``.

    Grid bounds are not checked; out-of-range entries resolve to
    background when queried through ``BinaryGrid.is_foreground``.
    """
    r, c = coord
    return tuple((r + dr, c + dc) for dr, dc in NEIGHBOUR8_OFFSETS)


class BinaryGrid:
    """Immutable 2D foreground/background grid with a sparse foreground index.

    Args:
        mask: 2D array-like; non-zero cells are foreground
        image_id: Optional identifier used for reporting

    Raises:
        ValueError: If ``mask`` is not two-dimensional
    """

    __slots__ = ("_mask", "_coordinates", "_index", "image_id")

    def __init__(self, mask, image_id: Optional[str] = None):
        array = np.asarray(mask)
        if array.ndim != 2:
            raise ValueError(f"Expected 2D mask, got {array.ndim}D array")

        dense = array.astype(bool, copy=True)
        dense.setflags(write=False)

        # np.argwhere enumerates in row-major order
        coordinates = tuple(
            (int(r), int(c)) for r, c in np.argwhere(dense).tolist()
        )

        self._mask = dense
        self._coordinates = coordinates
        self._index = frozenset(coordinates)
        self.image_id = image_id

    @classmethod
    def from_labels(cls, labels: np.ndarray, foreground_labels: Iterable[int] = (1,),
                    image_id: Optional[str] = None) -> "BinaryGrid":
        """Build a grid by selecting label values of an integer label slice."""
        labels = np.asarray(labels)
        values = list(foreground_labels)
        if not values:
            raise ValueError("At least one foreground label is required")
        return cls(np.isin(labels, values), image_id=image_id)

    @property
    def shape(self) -> Tuple[int, int]:
        return self._mask.shape

    @property
    def height(self) -> int:
        return self._mask.shape[0]

    @property
    def width(self) -> int:
        return self._mask.shape[1]

    @property
    def foreground_count(self) -> int:
        return len(self._coordinates)

    @property
    def is_empty(self) -> bool:
        """True for an all-background grid."""
        return not self._coordinates

    def is_foreground(self, coord: Coordinate) -> bool:
        """Membership test; out-of-range coordinates are background."""
        return coord in self._index

    def foreground_coordinates(self) -> Tuple[Coordinate, ...]:
        """Foreground coordinates in row-major order.

        The returned sequence is immutable and can be iterated any number
        of times.
        """
        return self._coordinates

    @property
    def foreground_index(self) -> frozenset:
        return self._index

    def to_array(self) -> np.ndarray:
        """Read-only dense boolean view of the grid."""
        return self._mask

    def __repr__(self) -> str:
        return (
            f"BinaryGrid(shape={self.shape}, foreground={self.foreground_count}, "
            f"image_id={self.image_id!r})"
        )


def is_contour_point(grid: BinaryGrid, coord: Coordinate) -> bool:
    """A contour point is foreground with at least one background 8-neighbour."""
    if not grid.is_foreground(coord):
        return False
    index = grid.foreground_index
    r, c = coord
    for dr, dc in NEIGHBOUR8_OFFSETS:
        if (r + dr, c + dc) not in index:
            return True
    return False


__all__ = [
    "Coordinate",
    "NEIGHBOUR8_OFFSETS",
    "neighbourhood8",
    "BinaryGrid",
    "is_contour_point",
]
