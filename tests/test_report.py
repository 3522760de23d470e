import logging

import numpy as np

from contour_ablation.extractors import ContourExtractor, DenseScanExtractor, MulberryExtractor
from contour_ablation.grid import BinaryGrid, InputError
from contour_ablation.harness import (
    AblationHarness,
    AblationReport,
    AblationRun,
    VariantSummary,
    describe_variant,
    format_report,
    log_report,
)


class FailingExtractor(ContourExtractor):
    name = "failing"

    def extract(self, grid):
        raise ValueError("unsupported grid")


def small_report(extractors=None):
    grids = [
        BinaryGrid(np.zeros((4, 4)), image_id="empty"),
        BinaryGrid(np.ones((5, 5)), image_id="square"),
    ]
    extractors = extractors or [DenseScanExtractor(), MulberryExtractor()]
    return AblationHarness(grids, extractors, mode="sequential").run()


def test_variant_block_layout():
    summary = VariantSummary.from_runs("mulberry", [
        AblationRun("mulberry", "a", 0, duration=2e-6, trivial=True),
        AblationRun("mulberry", "b", 1, duration=4e-6, contour_size=16),
    ])
    lines = describe_variant(summary, "dense-scan")

    assert lines[0] == "Profile `mulberry`:"
    assert all(line.startswith("    ") for line in lines[1:])
    text = "\n".join(lines)
    assert "Invalid backgrounds: 1" in text
    assert "Valid foregrounds: 1" in text
    assert "Mean time: 3.000 us" in text
    assert "Effective average time: 4.000 us" in text
    assert "Most time-consuming task costs 4.000 us" in text
    # No reference timing attached yet
    assert "Speedup vs `dense-scan`: /" in text


def test_format_report_lists_every_variant():
    report = small_report()
    text = format_report(report)

    assert "Profile `dense-scan`:" in text
    assert "Profile `mulberry`:" in text
    assert "2 images, 2 variants" in text
    assert "mode=sequential" in text
    assert "Failed runs" not in text
    assert "Correctness mismatches" not in text


def test_format_report_details_failures_and_excluded_volumes():
    report = small_report([DenseScanExtractor(), FailingExtractor()])
    report = AblationReport.combine(
        [report], input_errors=[InputError(7, "/data/segmentation-7.nii", "file not found")]
    )
    text = format_report(report)

    assert "Failed runs: 2" in text
    assert "failing @ square: ValueError: unsupported grid" in text
    assert "Excluded volumes: 1" in text
    assert "#7 /data/segmentation-7.nii: file not found" in text


def test_format_report_truncates_details():
    report = small_report([DenseScanExtractor(), FailingExtractor()])
    text = format_report(report, max_details=1)
    assert "... and 1 more" in text


def test_log_report(caplog):
    report = small_report()
    with caplog.at_level(logging.INFO, logger="contour_ablation.harness.report"):
        log_report(report)
    messages = [r.getMessage() for r in caplog.records]
    assert "Profile `mulberry`:" in messages
