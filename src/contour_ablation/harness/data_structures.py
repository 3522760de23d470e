"""Data structures for ablation results.

This module defines the per-run records, per-variant aggregates and the
final report produced by the ablation harness.
"""

import dataclasses
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..grid.source import InputError

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_FAILED = "failed"

RUN_COLUMNS = [
    'variant', 'image_id', 'image_index', 'status', 'duration',
    'contour_size', 'contour_digest', 'matches_reference', 'trivial', 'error',
]


def contour_digest(contour) -> str:
    """Order-independent BLAKE2b digest of a contour set.

    Raises:
        ValueError: If the entries are not (row, column) pairs
    """
    coords = np.array(sorted(contour), dtype=np.int64)
    if coords.size == 0:
        coords = coords.reshape(0, 2)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise ValueError(f"Expected (row, column) pairs, got array of shape {coords.shape}")
    return hashlib.blake2b(coords.tobytes(), digest_size=16).hexdigest()


@dataclass
class AblationRun:
    """Result of one (variant, image) extraction."""
    variant: str
    image_id: str
    image_index: int
    duration: float = 0.0
    status: str = STATUS_OK
    contour_size: int = 0
    contour_digest: str = ""
    contour: Optional[frozenset] = None
    matches_reference: Optional[bool] = None
    trivial: bool = False
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_OK

    @property
    def is_mismatch(self) -> bool:
        return self.matches_reference is False

    def same_contour(self, other: "AblationRun") -> bool:
        """Content comparison; uses full sets when both are kept, else size + digest."""
        if self.contour is not None and other.contour is not None:
            return self.contour == other.contour
        return (
            self.contour_size == other.contour_size
            and self.contour_digest == other.contour_digest
        )


@dataclass
class VariantSummary:
    """Aggregated statistics of one variant across all images."""
    variant: str
    runs: int = 0
    succeeded: int = 0
    failed: int = 0
    trivial_images: int = 0
    mean_duration: Optional[float] = None
    median_duration: Optional[float] = None
    max_duration: Optional[float] = None
    total_duration: float = 0.0
    effective_mean_duration: Optional[float] = None
    mismatches: int = 0
    speedup: Optional[float] = None

    @classmethod
    def from_runs(cls, variant: str, runs: Sequence[AblationRun]) -> "VariantSummary":
        ok = [r for r in runs if r.succeeded]
        durations = np.array([r.duration for r in ok], dtype=float)
        effective = np.array([r.duration for r in ok if not r.trivial], dtype=float)

        summary = cls(
            variant=variant,
            runs=len(runs),
            succeeded=len(ok),
            failed=len(runs) - len(ok),
            trivial_images=sum(1 for r in runs if r.trivial),
            total_duration=float(durations.sum()) if durations.size else 0.0,
            mismatches=sum(1 for r in runs if r.is_mismatch),
        )
        if durations.size:
            summary.mean_duration = float(np.mean(durations))
            summary.median_duration = float(np.median(durations))
            summary.max_duration = float(np.max(durations))
        if effective.size:
            summary.effective_mean_duration = float(np.mean(effective))
        return summary


@dataclass
class AblationReport:
    """Complete result of an ablation batch.

    ``runs`` are ordered by variant identifier, then by image, no matter
    in which order the work finished. Images are identified by their
    position in the batch input (``image_index``); ``image_ids`` lists the
    identifiers in that order, so input order stands in for sorting by
    identifier and volume slices stay in slice order.
    """
    reference: str
    variants: List[str] = field(default_factory=list)
    image_ids: List[str] = field(default_factory=list)
    runs: List[AblationRun] = field(default_factory=list)
    summaries: Dict[str, VariantSummary] = field(default_factory=dict)
    mode: str = ""
    wall_time: float = 0.0
    input_errors: List[InputError] = field(default_factory=list)

    @classmethod
    def from_runs(
        cls,
        runs: Iterable[AblationRun],
        reference: str,
        variants: Iterable[str],
        image_ids: Sequence[str],
        mode: str = "",
        wall_time: float = 0.0,
        input_errors: Optional[List[InputError]] = None,
    ) -> "AblationReport":
        variants = sorted(variants)
        runs = sorted(runs, key=lambda r: (r.variant, r.image_index))

        summaries = {}
        for variant in variants:
            summaries[variant] = VariantSummary.from_runs(
                variant, [r for r in runs if r.variant == variant]
            )

        ref_mean = summaries[reference].mean_duration if reference in summaries else None
        for summary in summaries.values():
            if ref_mean and summary.mean_duration:
                summary.speedup = ref_mean / summary.mean_duration

        return cls(
            reference=reference,
            variants=variants,
            image_ids=list(image_ids),
            runs=runs,
            summaries=summaries,
            mode=mode,
            wall_time=wall_time,
            input_errors=list(input_errors or []),
        )

    @classmethod
    def combine(cls, reports: Sequence["AblationReport"],
                input_errors: Optional[List[InputError]] = None) -> "AblationReport":
        """Merge reports of consecutive batches into one, recomputing aggregates.

        Raises:
            ValueError: If the reports disagree on reference or variants, or
                if there is nothing to combine
        """
        if not reports:
            raise ValueError("No reports to combine")

        first = reports[0]
        runs: List[AblationRun] = []
        image_ids: List[str] = []
        errors = list(input_errors or [])
        for report in reports:
            if report.reference != first.reference or report.variants != first.variants:
                raise ValueError("Cannot combine reports with different variants or reference")
            offset = len(image_ids)
            runs.extend(
                dataclasses.replace(r, image_index=r.image_index + offset)
                for r in report.runs
            )
            image_ids.extend(report.image_ids)
            errors.extend(report.input_errors)

        return cls.from_runs(
            runs,
            reference=first.reference,
            variants=first.variants,
            image_ids=image_ids,
            mode=first.mode,
            wall_time=sum(r.wall_time for r in reports),
            input_errors=errors,
        )

    def runs_for(self, variant: str) -> List[AblationRun]:
        return [r for r in self.runs if r.variant == variant]

    def get_run(self, variant: str, image_id: str) -> Optional[AblationRun]:
        for run in self.runs:
            if run.variant == variant and run.image_id == image_id:
                return run
        return None

    def failed_runs(self) -> List[AblationRun]:
        return [r for r in self.runs if not r.succeeded]

    def mismatched_runs(self) -> List[AblationRun]:
        return [r for r in self.runs if r.is_mismatch]

    @property
    def total_mismatches(self) -> int:
        return sum(s.mismatches for s in self.summaries.values())

    def content(self) -> List[tuple]:
        """Timing-free view of the runs, for comparing two executions."""
        return [
            (r.variant, r.image_id, r.status, r.contour_size, r.contour_digest, r.matches_reference)
            for r in self.runs
        ]

    def to_dataframe(self):
        """Convert runs to pandas DataFrame for easy analysis."""
        data = []
        for run in self.runs:
            data.append({
                'variant': run.variant,
                'image_id': run.image_id,
                'image_index': run.image_index,
                'status': run.status,
                'duration': run.duration,
                'contour_size': run.contour_size,
                'contour_digest': run.contour_digest,
                'matches_reference': run.matches_reference,
                'trivial': run.trivial,
                'error': run.error,
            })
        return pd.DataFrame(data, columns=RUN_COLUMNS)

    def summary_frame(self) -> pd.DataFrame:
        """Per-variant aggregates as a pandas DataFrame indexed by variant."""
        rows = [dataclasses.asdict(self.summaries[v]) for v in self.variants]
        return pd.DataFrame(rows).set_index('variant')


__all__ = [
    "STATUS_OK",
    "STATUS_FAILED",
    "contour_digest",
    "AblationRun",
    "VariantSummary",
    "AblationReport",
]
