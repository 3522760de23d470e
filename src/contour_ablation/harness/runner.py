"""Ablation harness orchestration.

Runs every registered extractor on every grid, times each call, checks
every variant against the reference variant and aggregates the result
into an ``AblationReport``.

Execution modes:
- sequential: one thread, variants in registration order, images in input order
- concurrent: a thread pool with one task per variant, or one task per
  (variant, image) pair when ``parallel_images`` is set

Grids are read-only and every task builds its own private results, so the
only synchronisation point is the join at the end of the batch.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from ..errors import ConfigurationError
from ..extractors.base import ContourExtractor, create_extractors
from ..grid.core import BinaryGrid
from ..utils.common import Timer
from .data_structures import (
    STATUS_FAILED,
    AblationReport,
    AblationRun,
    contour_digest,
)

logger = logging.getLogger(__name__)

MODE_SEQUENTIAL = "sequential"
MODE_CONCURRENT = "concurrent"
EXECUTION_MODES = (MODE_SEQUENTIAL, MODE_CONCURRENT)

DEFAULT_REFERENCE = "dense-scan"


class AblationHarness:
    """Runs an ablation batch over a fixed set of grids and variants.

    Args:
        grids: Input grids, in reporting order
        extractors: Variants to compare (unique names)
        reference: Name of the variant used as correctness oracle
        mode: ``"sequential"`` or ``"concurrent"``
        parallel_images: In concurrent mode, also parallelise across images
        max_workers: Thread pool size for ``parallel_images`` (default: executor default)
        keep_contours: Keep full contour sets in the report (otherwise size + digest only)
        show_progress: Show tqdm progress bars

    Raises:
        ConfigurationError: If the batch cannot be started
    """

    def __init__(
        self,
        grids: Sequence[BinaryGrid],
        extractors: Sequence[ContourExtractor],
        reference: str = DEFAULT_REFERENCE,
        mode: str = MODE_CONCURRENT,
        parallel_images: bool = False,
        max_workers: Optional[int] = None,
        keep_contours: bool = False,
        show_progress: bool = False,
    ):
        self.grids = list(grids)
        if not self.grids:
            raise ConfigurationError("No input grids given")

        extractors = list(extractors)
        if not extractors:
            raise ConfigurationError("No extractor variants registered")

        self.extractors: Dict[str, ContourExtractor] = {}
        for extractor in extractors:
            if extractor.name in self.extractors:
                raise ConfigurationError(f"Duplicate variant name: {extractor.name}")
            self.extractors[extractor.name] = extractor

        if reference not in self.extractors:
            raise ConfigurationError(
                f"Reference variant '{reference}' is not among {list(self.extractors)}"
            )
        if mode not in EXECUTION_MODES:
            raise ConfigurationError(f"Mode must be one of {EXECUTION_MODES}, got '{mode}'")
        if max_workers is not None and max_workers < 1:
            raise ConfigurationError(f"max_workers must be positive, got {max_workers}")

        self.image_ids = [
            g.image_id if g.image_id is not None else f"image-{i:05d}"
            for i, g in enumerate(self.grids)
        ]
        if len(set(self.image_ids)) != len(self.image_ids):
            raise ConfigurationError("Image identifiers must be unique within a batch")

        self.reference = reference
        self.mode = mode
        self.parallel_images = parallel_images
        self.max_workers = max_workers
        self.keep_contours = keep_contours
        self.show_progress = show_progress

    @classmethod
    def from_config(cls, grids: Sequence[BinaryGrid], config, extraction_config=None,
                    show_progress: bool = False) -> "AblationHarness":
        """Build a harness from a ``HarnessConfig`` (variants are created from the registry)."""
        return cls(
            grids,
            create_extractors(config.variants, extraction_config),
            reference=config.reference,
            mode=config.mode,
            parallel_images=config.parallel_images,
            max_workers=config.max_workers,
            keep_contours=config.keep_contours,
            show_progress=show_progress,
        )

    @property
    def variant_names(self) -> List[str]:
        return list(self.extractors)

    def run(self) -> AblationReport:
        """Execute all (variant, image) pairs and build the report."""
        n_images = len(self.grids)
        n_variants = len(self.extractors)
        with Timer(f"Ablation batch ({n_variants} variants x {n_images} images, {self.mode})",
                   level=logging.DEBUG) as timer:
            if self.mode == MODE_SEQUENTIAL:
                runs = self._run_sequential()
            else:
                runs = self._run_concurrent()

        self._compare_with_reference(runs)

        if not self.keep_contours:
            for run in runs:
                run.contour = None

        report = AblationReport.from_runs(
            runs,
            reference=self.reference,
            variants=self.variant_names,
            image_ids=self.image_ids,
            mode=self.mode,
            wall_time=timer.elapsed,
        )

        failed = len(report.failed_runs())
        if failed:
            logger.warning(f"{failed} of {len(runs)} runs failed")
        if report.total_mismatches:
            logger.warning(f"{report.total_mismatches} runs disagree with '{self.reference}'")
        return report

    def _run_sequential(self) -> List[AblationRun]:
        runs = []
        for name in self.extractors:
            runs.extend(self._run_pairs(name, range(len(self.grids))))
        return runs

    def _run_concurrent(self) -> List[AblationRun]:
        all_images = list(range(len(self.grids)))
        if self.parallel_images:
            tasks = [(name, [i]) for name in self.extractors for i in all_images]
            workers = self.max_workers
        else:
            # One thread per variant
            tasks = [(name, all_images) for name in self.extractors]
            workers = len(tasks)

        runs = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._run_pairs, name, indices): (name, indices)
                for name, indices in tasks
            }
            for future in as_completed(futures):
                name, indices = futures[future]
                try:
                    runs.extend(future.result())
                except Exception as e:
                    logger.error(f"Worker for '{name}' died: {e}")
                    runs.extend(self._failed_run(name, i, 0.0, e) for i in indices)
        return runs

    def _run_pairs(self, name: str, indices) -> List[AblationRun]:
        extractor = self.extractors[name]
        position = self.variant_names.index(name)
        iterator = tqdm(
            indices, desc=name, position=position, leave=False,
            disable=not self.show_progress or len(indices) == 1,
        )
        return [self._run_pair(extractor, i) for i in iterator]

    def _run_pair(self, extractor: ContourExtractor, index: int) -> AblationRun:
        grid = self.grids[index]
        start = time.perf_counter()
        duration = 0.0
        try:
            contour = extractor.extract(grid)
            duration = time.perf_counter() - start

            # Malformed variant output counts as a failure of this pair only
            if not isinstance(contour, frozenset):
                contour = frozenset(contour)
            digest = contour_digest(contour)
        except Exception as e:
            if not duration:
                duration = time.perf_counter() - start
            logger.warning(f"'{extractor.name}' failed on {self.image_ids[index]}: {e}")
            return self._failed_run(extractor.name, index, duration, e)

        return AblationRun(
            variant=extractor.name,
            image_id=self.image_ids[index],
            image_index=index,
            duration=duration,
            contour_size=len(contour),
            contour_digest=digest,
            contour=contour,
            trivial=grid.is_empty,
        )

    def _failed_run(self, name: str, index: int, duration: float, error: Exception) -> AblationRun:
        return AblationRun(
            variant=name,
            image_id=self.image_ids[index],
            image_index=index,
            duration=duration,
            status=STATUS_FAILED,
            trivial=self.grids[index].is_empty,
            error=f"{type(error).__name__}: {error}",
        )

    def _compare_with_reference(self, runs: List[AblationRun]) -> None:
        by_pair = {(r.variant, r.image_index): r for r in runs}
        for index, image_id in enumerate(self.image_ids):
            ref = by_pair[(self.reference, index)]
            for name in self.extractors:
                run = by_pair[(name, index)]
                if not run.succeeded:
                    run.matches_reference = None
                elif name == self.reference:
                    run.matches_reference = True
                elif not ref.succeeded:
                    run.matches_reference = None
                else:
                    run.matches_reference = run.same_contour(ref)
                    if not run.matches_reference:
                        logger.warning(
                            f"Mismatch on {image_id}: '{name}' found {run.contour_size} "
                            f"contour points, '{self.reference}' found {ref.contour_size}"
                        )


__all__ = [
    "MODE_SEQUENTIAL",
    "MODE_CONCURRENT",
    "EXECUTION_MODES",
    "DEFAULT_REFERENCE",
    "AblationHarness",
]
