"""Text rendering of ablation reports.

Each variant gets one block::

    Profile `mulberry`:
        Runs: 120 (failed: 0)
        Invalid backgrounds: 64
        ...

Durations are shown in microseconds; missing values as ``/``.
"""

import logging
from typing import List, Optional

from .data_structures import AblationReport, VariantSummary

logger = logging.getLogger(__name__)

SEP = "-" * 56
INDENT = "    "


def _us(seconds: Optional[float]) -> str:
    if seconds is None:
        return "/"
    return f"{seconds * 1e6:.3f}"


def _ratio(value: Optional[float]) -> str:
    if value is None:
        return "/"
    return f"{value:.3f}x"


def describe_variant(summary: VariantSummary, reference: str) -> List[str]:
    """Lines describing one variant's aggregates."""
    lines = [f"Profile `{summary.variant}`:"]
    body = [
        f"Runs: {summary.runs} (failed: {summary.failed})",
        f"Invalid backgrounds: {summary.trivial_images}",
        f"Valid foregrounds: {summary.runs - summary.trivial_images}",
        f"Total time: {_us(summary.total_duration)} us",
        f"Mean time: {_us(summary.mean_duration)} us",
        f"Median time: {_us(summary.median_duration)} us",
        f"Effective average time: {_us(summary.effective_mean_duration)} us",
        f"Most time-consuming task costs {_us(summary.max_duration)} us",
        f"Speedup vs `{reference}`: {_ratio(summary.speedup)}",
        f"Mismatches vs `{reference}`: {summary.mismatches}",
    ]
    lines.extend(INDENT + line for line in body)
    return lines


def format_report(report: AblationReport, max_details: int = 10) -> str:
    """Render a full report, including failed runs and mismatches.

    Args:
        report: Report to render
        max_details: Maximum number of failed/mismatched runs listed by name
    """
    lines = [SEP]
    lines.append(
        f"Ablation report: {len(report.image_ids)} images, {len(report.variants)} variants, "
        f"mode={report.mode or '/'}, reference=`{report.reference}`, "
        f"wall time {report.wall_time:.2f}s"
    )
    lines.append(SEP)
    for variant in report.variants:
        lines.extend(describe_variant(report.summaries[variant], report.reference))
        lines.append(SEP)

    failed = report.failed_runs()
    if failed:
        lines.append(f"Failed runs: {len(failed)}")
        for run in failed[:max_details]:
            lines.append(f"{INDENT}{run.variant} @ {run.image_id}: {run.error}")
        if len(failed) > max_details:
            lines.append(f"{INDENT}... and {len(failed) - max_details} more")

    mismatched = report.mismatched_runs()
    if mismatched:
        lines.append(f"Correctness mismatches: {len(mismatched)}")
        for run in mismatched[:max_details]:
            lines.append(f"{INDENT}{run.variant} @ {run.image_id} ({run.contour_size} points)")
        if len(mismatched) > max_details:
            lines.append(f"{INDENT}... and {len(mismatched) - max_details} more")

    if report.input_errors:
        lines.append(f"Excluded volumes: {len(report.input_errors)}")
        for err in report.input_errors[:max_details]:
            lines.append(f"{INDENT}#{err.volume_index} {err.path}: {err.reason}")

    if failed or mismatched or report.input_errors:
        lines.append(SEP)
    return "\n".join(lines)


def log_report(report: AblationReport, level: int = logging.INFO) -> None:
    """Send the rendered report to the log, one record per line."""
    for line in format_report(report).splitlines():
        logger.log(level, line)


__all__ = ["describe_variant", "format_report", "log_report"]
