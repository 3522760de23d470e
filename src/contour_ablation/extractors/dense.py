"""Dense-Scan extractor, the correctness reference."""

from ..grid.core import BinaryGrid, is_contour_point
from .base import ContourExtractor, ContourSet, register_extractor


class DenseScanExtractor(ContourExtractor):
    """Tests the 8-neighbourhood of every foreground pixel.

    Cost is ``foreground_count * 8`` membership tests on the sparse index.
    """

    name = "dense-scan"

    def extract(self, grid: BinaryGrid) -> ContourSet:
        return frozenset(
            p for p in grid.foreground_coordinates() if is_contour_point(grid, p)
        )


@register_extractor(DenseScanExtractor.name)
def _make_dense_scan(config=None) -> DenseScanExtractor:
    return DenseScanExtractor()


__all__ = ["DenseScanExtractor"]
