"""Contour Ablation Core Package

This package contains the contour-extraction engine and its ablation harness:
- Binary grids with a sparse foreground index
- Interchangeable contour extractors (Dense-Scan, Mulberry, morphological baselines)
- Sequential/concurrent ablation runs with cross-variant correctness checks
- Label volume loading and reporting
"""

__version__ = "1.0.0"
__author__ = "Contour Ablation Team"

from .errors import ContourAblationError, ConfigurationError, VolumeLoadError
from .grid import (
    Coordinate, BinaryGrid, neighbourhood8, is_contour_point,
    InputError, VolumeSource,
)
from .extractors import (
    ContourSet, ContourExtractor,
    DenseScanExtractor, MulberryExtractor,
    NdimageErosionExtractor, OpenCVErosionExtractor, SkimageBoundaryExtractor,
    FrontierStats, available_extractors, create_extractor, create_extractors,
)
from .harness import (
    AblationHarness, AblationReport, AblationRun, VariantSummary,
    MODE_SEQUENTIAL, MODE_CONCURRENT,
    format_report, log_report,
)

from .config import DEFAULT_CONFIG, AblationConfig, resolve_dataset_root
from .utils import setup_logging, Timer, natural_sort_key, get_volume_files

__all__ = [
    # Errors
    "ContourAblationError",
    "ConfigurationError",
    "VolumeLoadError",

    # Grid
    "Coordinate",
    "BinaryGrid",
    "neighbourhood8",
    "is_contour_point",
    "InputError",
    "VolumeSource",

    # Extractors
    "ContourSet",
    "ContourExtractor",
    "DenseScanExtractor",
    "MulberryExtractor",
    "NdimageErosionExtractor",
    "OpenCVErosionExtractor",
    "SkimageBoundaryExtractor",
    "FrontierStats",
    "available_extractors",
    "create_extractor",
    "create_extractors",

    # Harness
    "AblationHarness",
    "AblationReport",
    "AblationRun",
    "VariantSummary",
    "MODE_SEQUENTIAL",
    "MODE_CONCURRENT",
    "format_report",
    "log_report",

    # Configuration
    "DEFAULT_CONFIG",
    "AblationConfig",
    "resolve_dataset_root",

    # Utilities
    "setup_logging",
    "Timer",
    "natural_sort_key",
    "get_volume_files",
]
