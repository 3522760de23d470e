"""Mulberry: frontier-driven sparse contour extractor.

Instead of testing every foreground pixel, Mulberry starts from pixels that
are known to lie on a contour and only spreads to pixels within one hop of
a contour pixel. Interior pixels far from any background are never
examined.

Seeding:
    Every horizontal run endpoint of the foreground. Run endpoints are found
    in one pass over the row-major foreground list by looking for gaps
    between consecutive coordinates. A run endpoint has a background or
    out-of-range horizontal neighbour, so every seed is a contour point.

Traversal:
    A heap ordered by a priority key. A popped pixel is resolved with the
    same 8-neighbour test as Dense-Scan. Contour pixels enqueue their
    unvisited foreground 8-neighbours; interior pixels are marked visited
    and not expanded.

Every contour pixel is connected through contour pixels to some run
endpoint (walking along its row towards the background run that touches
it), so the traversal reaches exactly the Dense-Scan set. The priority key
only changes the order of work.
"""

import heapq
import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple, Union

from ..errors import ConfigurationError
from ..grid.core import NEIGHBOUR8_OFFSETS, BinaryGrid, Coordinate, is_contour_point
from .base import EMPTY_CONTOUR, ContourExtractor, ContourSet, register_extractor

logger = logging.getLogger(__name__)

PriorityKey = Callable[[Coordinate], tuple]

PRIORITY_KEYS = {
    "raster": lambda p: p,
    "reverse-raster": lambda p: (-p[0], -p[1]),
    "column-major": lambda p: (p[1], p[0]),
}


def resolve_priority_key(key: Union[str, PriorityKey]) -> PriorityKey:
    """Look up a named priority key, or pass a callable through."""
    if callable(key):
        return key
    try:
        return PRIORITY_KEYS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown priority key '{key}'. Available: {', '.join(sorted(PRIORITY_KEYS))}"
        ) from None


@dataclass
class FrontierStats:
    """Work counters of one Mulberry traversal."""
    foreground: int = 0
    seeds: int = 0
    evaluated: int = 0
    interior_visited: int = 0
    contour: int = 0

    @property
    def skipped(self) -> int:
        """Foreground pixels never examined individually."""
        return self.foreground - self.evaluated


def run_endpoints(coordinates: Sequence[Coordinate]) -> List[Coordinate]:
    """Start and end pixels of every horizontal foreground run.

    Args:
        coordinates: Foreground coordinates in row-major order
    """
    seeds = []
    last = len(coordinates) - 1
    for i, (r, c) in enumerate(coordinates):
        starts = i == 0 or coordinates[i - 1] != (r, c - 1)
        ends = i == last or coordinates[i + 1] != (r, c + 1)
        if starts or ends:
            seeds.append((r, c))
    return seeds


class MulberryExtractor(ContourExtractor):
    """Proposed sparse extractor.

    Args:
        priority: Named priority key (``raster``, ``reverse-raster``,
            ``column-major``) or a callable mapping a coordinate to a
            sortable key
    """

    name = "mulberry"

    def __init__(self, priority: Union[str, PriorityKey] = "raster"):
        self.priority = priority
        self._key = resolve_priority_key(priority)

    def extract(self, grid: BinaryGrid) -> ContourSet:
        contour, _ = self.traverse(grid)
        return contour

    def traverse(self, grid: BinaryGrid) -> Tuple[ContourSet, FrontierStats]:
        """Run the frontier traversal and return the contour with work counters."""
        coordinates = grid.foreground_coordinates()
        stats = FrontierStats(foreground=len(coordinates))
        if not coordinates:
            return EMPTY_CONTOUR, stats

        index = grid.foreground_index
        key = self._key

        seeds = run_endpoints(coordinates)
        stats.seeds = len(seeds)

        visited = set(seeds)
        heap = [(key(p), p) for p in seeds]
        heapq.heapify(heap)

        contour = []
        interior = 0
        while heap:
            _, p = heapq.heappop(heap)
            if not is_contour_point(grid, p):
                interior += 1
                continue

            contour.append(p)
            r, c = p
            for dr, dc in NEIGHBOUR8_OFFSETS:
                q = (r + dr, c + dc)
                if q in index and q not in visited:
                    visited.add(q)
                    heapq.heappush(heap, (key(q), q))

        stats.evaluated = len(visited)
        stats.interior_visited = interior
        stats.contour = len(contour)
        logger.debug(
            f"Mulberry {grid.image_id}: seeds={stats.seeds}, evaluated={stats.evaluated}, "
            f"skipped={stats.skipped}"
        )
        return frozenset(contour), stats


@register_extractor(MulberryExtractor.name)
def _make_mulberry(config=None) -> MulberryExtractor:
    if config is None:
        return MulberryExtractor()
    return MulberryExtractor(priority=config.mulberry_priority)


__all__ = [
    "PRIORITY_KEYS",
    "resolve_priority_key",
    "FrontierStats",
    "run_endpoints",
    "MulberryExtractor",
]
