"""Contour Extractors Package

This package holds the interchangeable contour extraction variants:
- dense: Dense-Scan reference
- mulberry: proposed frontier-driven sparse extractor
- morphology: dense erosion/boundary baselines (SciPy, OpenCV, scikit-image)
"""

from .base import (
    ContourSet,
    EMPTY_CONTOUR,
    ContourExtractor,
    contour_from_mask,
    register_extractor,
    available_extractors,
    create_extractor,
    create_extractors,
)
from .dense import DenseScanExtractor
from .mulberry import (
    PRIORITY_KEYS,
    resolve_priority_key,
    FrontierStats,
    run_endpoints,
    MulberryExtractor,
)
from .morphology import (
    NdimageErosionExtractor,
    OpenCVErosionExtractor,
    SkimageBoundaryExtractor,
)

__all__ = [
    # Interface and registry
    "ContourSet",
    "EMPTY_CONTOUR",
    "ContourExtractor",
    "contour_from_mask",
    "register_extractor",
    "available_extractors",
    "create_extractor",
    "create_extractors",

    # Variants
    "DenseScanExtractor",
    "MulberryExtractor",
    "NdimageErosionExtractor",
    "OpenCVErosionExtractor",
    "SkimageBoundaryExtractor",

    # Mulberry internals
    "PRIORITY_KEYS",
    "resolve_priority_key",
    "FrontierStats",
    "run_endpoints",
]
