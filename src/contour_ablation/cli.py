"""Batch entry point: run the contour ablation over a label dataset.

Loads every configured label volume, runs one harness batch per volume
(so only one volume's grids are in memory at a time), combines the
per-volume reports and prints the result.
"""

import argparse
import logging
import sys
from typing import List, Optional

from tqdm import tqdm

from .config import AblationConfig, resolve_dataset_root
from .errors import ConfigurationError
from .extractors import create_extractors
from .grid.source import InputError, VolumeSource
from .harness import EXECUTION_MODES, AblationHarness, AblationReport, format_report
from .utils.common import Timer, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare contour extraction variants on LiTS label volumes.",
    )
    parser.add_argument("--config", default=None,
                        help="YAML configuration file (defaults are used when omitted)")
    parser.add_argument("--dataset-root", default=None,
                        help="Directory holding segmentation-{index}.nii files")
    parser.add_argument("--mode", choices=EXECUTION_MODES, default=None,
                        help="Execution mode (overrides the configuration)")
    parser.add_argument("--max-volumes", type=int, default=None,
                        help="Only process the first N volumes")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AblationConfig:
    """Load the configuration file and apply command line overrides."""
    config = AblationConfig.load_from_file(args.config) if args.config else AblationConfig()
    if args.dataset_root is not None:
        config.dataset.root = args.dataset_root
    if args.mode is not None:
        config.harness.mode = args.mode
    if args.max_volumes is not None:
        config.dataset.max_volumes = args.max_volumes
    if args.verbose:
        config.verbose = True
    return config


def run_batch(config: AblationConfig) -> AblationReport:
    """Run the ablation over every configured volume.

    Raises:
        ConfigurationError: If the batch cannot start (bad root, unknown
            variant, no volumes) or no volume could be loaded
    """
    root = resolve_dataset_root(config.dataset)
    source = VolumeSource.from_config(config.dataset, root)
    extractors = create_extractors(config.harness.variants, config.extraction)

    if config.harness.reference not in config.harness.variants:
        raise ConfigurationError(
            f"Reference variant '{config.harness.reference}' is not in {list(config.harness.variants)}"
        )
    if config.harness.mode not in EXECUTION_MODES:
        raise ConfigurationError(f"Mode must be one of {EXECUTION_MODES}, got '{config.harness.mode}'")

    paths = source.volume_paths()
    if not paths:
        raise ConfigurationError(f"No label volumes found in {root}")

    logger.info(f"Dataset root  : {root}")
    logger.info(f"Volumes       : {len(paths)}")
    logger.info(f"Variants      : {', '.join(config.harness.variants)}")
    logger.info(f"Reference     : {config.harness.reference}")
    logger.info(f"Mode          : {config.harness.mode}")

    reports = []
    input_errors: List[InputError] = []
    volumes = tqdm(source.iter_volumes(), total=len(paths), desc="Volumes",
                   disable=not config.show_progress)
    for idx, grids in volumes:
        if isinstance(grids, InputError):
            input_errors.append(grids)
            continue
        if not grids:
            logger.warning(f"Volume {idx} has no slices, skipping")
            continue

        harness = AblationHarness(
            grids,
            extractors,
            reference=config.harness.reference,
            mode=config.harness.mode,
            parallel_images=config.harness.parallel_images,
            max_workers=config.harness.max_workers,
            keep_contours=config.harness.keep_contours,
        )
        with Timer(f"Volume {idx} ({len(grids)} slices)", level=logging.DEBUG):
            reports.append(harness.run())

    if not reports:
        raise ConfigurationError(f"None of the {len(paths)} volumes could be loaded")

    return AblationReport.combine(reports, input_errors=input_errors)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = build_config(args)
        if config.verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        logger.info("Running ablation studies...")
        report = run_batch(config)
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
