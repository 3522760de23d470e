"""Dense morphological baselines.

These variants work on the dense mask instead of the sparse index, so
their cost follows the slice area. Each one reproduces the 8-neighbour
contour exactly: a 3x3 erosion with a zero border keeps only pixels whose
whole neighbourhood is foreground, and the contour is the mask minus that
erosion.
"""

import logging

import cv2
import numpy as np
from scipy import ndimage
from skimage.segmentation import find_boundaries

from ..grid.core import BinaryGrid
from .base import EMPTY_CONTOUR, ContourExtractor, ContourSet, contour_from_mask, register_extractor

logger = logging.getLogger(__name__)

STRUCTURE_3X3 = np.ones((3, 3), dtype=bool)


class NdimageErosionExtractor(ContourExtractor):
    """Contour as ``mask & ~binary_erosion(mask)`` using SciPy."""

    name = "ndimage-erosion"

    def extract(self, grid: BinaryGrid) -> ContourSet:
        if grid.is_empty:
            return EMPTY_CONTOUR
        mask = grid.to_array()
        eroded = ndimage.binary_erosion(mask, structure=STRUCTURE_3X3, border_value=0)
        return contour_from_mask(mask & ~eroded)


class OpenCVErosionExtractor(ContourExtractor):
    """Same as the SciPy baseline with ``cv2.erode``."""

    name = "opencv-erosion"

    def __init__(self):
        self.kernel = np.ones((3, 3), dtype=np.uint8)

    def extract(self, grid: BinaryGrid) -> ContourSet:
        if grid.is_empty:
            return EMPTY_CONTOUR
        mask = grid.to_array().astype(np.uint8)
        # Default erode border treats outside pixels as foreground
        eroded = cv2.erode(
            mask, self.kernel,
            borderType=cv2.BORDER_CONSTANT, borderValue=0
        )
        return contour_from_mask((mask > 0) & (eroded == 0))


class SkimageBoundaryExtractor(ContourExtractor):
    """Inner boundaries from scikit-image with full (8) connectivity."""

    name = "skimage-boundaries"

    def extract(self, grid: BinaryGrid) -> ContourSet:
        if grid.is_empty:
            return EMPTY_CONTOUR
        # Pad so that out-of-range neighbours count as background
        padded = np.pad(grid.to_array().astype(np.uint8), 1, mode="constant")
        boundaries = find_boundaries(padded, connectivity=2, mode="inner")
        return contour_from_mask(boundaries[1:-1, 1:-1])


@register_extractor(NdimageErosionExtractor.name)
def _make_ndimage(config=None) -> NdimageErosionExtractor:
    return NdimageErosionExtractor()


@register_extractor(OpenCVErosionExtractor.name)
def _make_opencv(config=None) -> OpenCVErosionExtractor:
    return OpenCVErosionExtractor()


@register_extractor(SkimageBoundaryExtractor.name)
def _make_skimage(config=None) -> SkimageBoundaryExtractor:
    return SkimageBoundaryExtractor()


__all__ = [
    "NdimageErosionExtractor",
    "OpenCVErosionExtractor",
    "SkimageBoundaryExtractor",
]
