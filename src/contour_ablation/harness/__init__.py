"""Ablation Harness Package

This package runs and reports contour extraction ablations:
- Run records and report aggregates
- Sequential and concurrent batch execution
- Text rendering of reports
"""

from .data_structures import (
    STATUS_OK,
    STATUS_FAILED,
    contour_digest,
    AblationRun,
    VariantSummary,
    AblationReport,
)
from .runner import (
    MODE_SEQUENTIAL,
    MODE_CONCURRENT,
    EXECUTION_MODES,
    DEFAULT_REFERENCE,
    AblationHarness,
)
from .report import describe_variant, format_report, log_report

__all__ = [
    # Data structures
    "STATUS_OK",
    "STATUS_FAILED",
    "contour_digest",
    "AblationRun",
    "VariantSummary",
    "AblationReport",

    # Execution
    "MODE_SEQUENTIAL",
    "MODE_CONCURRENT",
    "EXECUTION_MODES",
    "DEFAULT_REFERENCE",
    "AblationHarness",

    # Reporting
    "describe_variant",
    "format_report",
    "log_report",
]
