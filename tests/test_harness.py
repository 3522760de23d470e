import numpy as np
import pytest

from contour_ablation.errors import ConfigurationError
from contour_ablation.extractors import (
    ContourExtractor,
    DenseScanExtractor,
    MulberryExtractor,
    NdimageErosionExtractor,
    create_extractors,
)
from contour_ablation.config import ExtractionConfig, HarnessConfig
from contour_ablation.grid import BinaryGrid
from contour_ablation.harness import (
    STATUS_FAILED,
    AblationHarness,
    AblationReport,
)

from generate_test_data import blob_mask, noise_mask, ring_mask


class ExplodingExtractor(ContourExtractor):
    """Fails on one image, otherwise behaves like Dense-Scan."""

    name = "exploding"

    def __init__(self, bad_image_id):
        self.bad_image_id = bad_image_id
        self._dense = DenseScanExtractor()

    def extract(self, grid):
        if grid.image_id == self.bad_image_id:
            raise RuntimeError("boom")
        return self._dense.extract(grid)


class DroppingExtractor(ContourExtractor):
    """Buggy variant that loses the first contour point of every image."""

    name = "dropping"

    def extract(self, grid):
        contour = sorted(DenseScanExtractor().extract(grid))
        return frozenset(contour[1:])


def make_grids():
    masks = [
        np.zeros((16, 16), dtype=bool),
        blob_mask((48, 48), seed=1),
        ring_mask(),
        noise_mask((20, 20), seed=4, density=0.6),
        blob_mask((48, 48), seed=2),
    ]
    return [BinaryGrid(m, image_id=f"img-{i}") for i, m in enumerate(masks)]


def default_variants():
    return [DenseScanExtractor(), MulberryExtractor(), NdimageErosionExtractor()]


@pytest.mark.parametrize("mode,parallel_images", [
    ("sequential", False),
    ("concurrent", False),
    ("concurrent", True),
])
def test_all_pairs_run_and_agree(mode, parallel_images):
    grids = make_grids()
    report = AblationHarness(
        grids, default_variants(), mode=mode, parallel_images=parallel_images, max_workers=3
    ).run()

    assert len(report.runs) == 3 * len(grids)
    assert report.failed_runs() == []
    assert report.total_mismatches == 0
    assert all(r.matches_reference for r in report.runs)
    assert report.mode == mode

    for variant in report.variants:
        summary = report.summaries[variant]
        assert summary.runs == len(grids)
        assert summary.trivial_images == 1
        assert summary.mean_duration is not None
    assert report.summaries["dense-scan"].speedup == pytest.approx(1.0)


def test_modes_produce_same_content():
    grids = make_grids()
    sequential = AblationHarness(grids, default_variants(), mode="sequential").run()
    concurrent = AblationHarness(grids, default_variants(), mode="concurrent").run()
    per_image = AblationHarness(grids, default_variants(), mode="concurrent",
                                parallel_images=True).run()

    assert sequential.content() == concurrent.content() == per_image.content()


def test_runs_ordered_by_variant_then_image():
    grids = make_grids()
    report = AblationHarness(grids, default_variants(), mode="concurrent",
                             parallel_images=True).run()

    assert report.variants == ["dense-scan", "mulberry", "ndimage-erosion"]
    keys = [(r.variant, r.image_index) for r in report.runs]
    assert keys == sorted(keys)
    assert [r.image_id for r in report.runs_for("mulberry")] == [g.image_id for g in grids]


def test_runs_keep_input_order_not_id_order():
    grids = [
        BinaryGrid(np.ones((3, 3)), image_id="z-last"),
        BinaryGrid(np.zeros((3, 3)), image_id="a-first"),
    ]
    report = AblationHarness(grids, default_variants(), mode="concurrent",
                             parallel_images=True).run()

    assert report.image_ids == ["z-last", "a-first"]
    for variant in report.variants:
        assert [r.image_id for r in report.runs_for(variant)] == ["z-last", "a-first"]


@pytest.mark.parametrize("bad_output", [None, 42, frozenset({(1, 2, 3)}), [(0,), (1,)]])
@pytest.mark.parametrize("mode", ["sequential", "concurrent"])
def test_malformed_output_fails_only_its_pair(mode, bad_output):
    class MalformedOnce(ContourExtractor):
        name = "malformed"

        def extract(self, grid):
            if grid.image_id == "img-2":
                return bad_output
            return DenseScanExtractor().extract(grid)

    grids = make_grids()
    report = AblationHarness(grids, [DenseScanExtractor(), MalformedOnce()], mode=mode).run()

    statuses = [r.status for r in report.runs_for("malformed")]
    assert statuses == ["ok", "ok", STATUS_FAILED, "ok", "ok"]
    failed = report.get_run("malformed", "img-2")
    assert failed.error
    assert failed.matches_reference is None
    assert all(r.matches_reference for r in report.runs_for("malformed") if r.succeeded)
    assert all(r.succeeded for r in report.runs_for("dense-scan"))


def test_failed_pair_does_not_stop_batch():
    grids = make_grids()
    extractors = [DenseScanExtractor(), ExplodingExtractor("img-2")]
    report = AblationHarness(grids, extractors, mode="concurrent").run()

    failed = report.failed_runs()
    assert len(failed) == 1
    assert failed[0].variant == "exploding"
    assert failed[0].image_id == "img-2"
    assert failed[0].status == STATUS_FAILED
    assert "RuntimeError: boom" in failed[0].error
    assert failed[0].matches_reference is None

    # Everything else still ran and was checked
    others = [r for r in report.runs if r.succeeded]
    assert len(others) == 2 * len(grids) - 1
    assert all(r.matches_reference for r in others)

    summary = report.summaries["exploding"]
    assert summary.failed == 1
    assert summary.succeeded == len(grids) - 1
    assert summary.mismatches == 0


def test_failed_reference_leaves_comparison_undetermined():
    class BrokenReference(ExplodingExtractor):
        name = "dense-scan"

    grids = make_grids()
    report = AblationHarness(
        grids, [BrokenReference("img-1"), MulberryExtractor()], mode="sequential"
    ).run()

    mulberry = report.get_run("mulberry", "img-1")
    assert mulberry.succeeded
    assert mulberry.matches_reference is None
    assert report.get_run("mulberry", "img-3").matches_reference is True


def test_worker_death_marks_all_its_pairs_failed(monkeypatch):
    grids = make_grids()
    harness = AblationHarness(grids, default_variants(), mode="concurrent")
    original = harness._run_pairs

    def run_pairs(name, indices):
        if name == "mulberry":
            raise MemoryError("worker lost")
        return original(name, indices)

    monkeypatch.setattr(harness, "_run_pairs", run_pairs)
    report = harness.run()

    assert len(report.runs) == 3 * len(grids)
    mulberry_runs = report.runs_for("mulberry")
    assert all(r.status == STATUS_FAILED for r in mulberry_runs)
    assert all("worker lost" in r.error for r in mulberry_runs)
    assert all(r.succeeded for r in report.runs_for("dense-scan"))
    assert report.summaries["mulberry"].mean_duration is None
    assert report.summaries["mulberry"].speedup is None


def test_buggy_variant_is_counted_not_hidden():
    grids = make_grids()
    report = AblationHarness(grids, [DenseScanExtractor(), DroppingExtractor()],
                             mode="concurrent").run()

    # The empty image has nothing to drop
    assert report.summaries["dropping"].mismatches == len(grids) - 1
    assert report.total_mismatches == len(grids) - 1
    assert report.get_run("dropping", "img-0").matches_reference is True
    assert all(r.is_mismatch for r in report.mismatched_runs())


def test_digest_comparison_without_kept_contours():
    grids = make_grids()
    report = AblationHarness(grids, [DenseScanExtractor(), DroppingExtractor()]).run()
    assert all(r.contour is None for r in report.runs)
    assert report.total_mismatches == len(grids) - 1

    kept = AblationHarness(grids, [DenseScanExtractor(), MulberryExtractor()],
                           keep_contours=True).run()
    for run in kept.runs:
        assert run.contour is not None
        assert len(run.contour) == run.contour_size


def test_default_image_ids():
    grids = [BinaryGrid(np.ones((3, 3))), BinaryGrid(np.zeros((3, 3)))]
    harness = AblationHarness(grids, [DenseScanExtractor()])
    assert harness.image_ids == ["image-00000", "image-00001"]


@pytest.mark.parametrize("kwargs", [
    {"grids": []},
    {"extractors": []},
    {"extractors": [DenseScanExtractor(), DenseScanExtractor()]},
    {"reference": "mulberry"},
    {"mode": "distributed"},
    {"max_workers": 0},
    {"grids": [BinaryGrid(np.ones((2, 2)), image_id="a"),
               BinaryGrid(np.ones((2, 2)), image_id="a")]},
])
def test_invalid_batch_is_rejected(kwargs):
    params = {
        "grids": make_grids(),
        "extractors": [DenseScanExtractor()],
        "reference": "dense-scan",
    }
    params.update(kwargs)
    with pytest.raises(ConfigurationError):
        AblationHarness(**params)


def test_from_config():
    config = HarnessConfig(mode="sequential", variants=("dense-scan", "mulberry"))
    harness = AblationHarness.from_config(
        make_grids(), config, ExtractionConfig(mulberry_priority="reverse-raster")
    )
    assert harness.variant_names == ["dense-scan", "mulberry"]
    assert harness.extractors["mulberry"].priority == "reverse-raster"
    assert harness.mode == "sequential"


def test_combine_matches_single_batch():
    grids = make_grids()
    extractors = create_extractors(["dense-scan", "mulberry", "opencv-erosion"])

    whole = AblationHarness(grids, extractors, mode="sequential").run()
    parts = [
        AblationHarness(grids[:2], extractors, mode="sequential").run(),
        AblationHarness(grids[2:], extractors, mode="sequential").run(),
    ]
    combined = AblationReport.combine(parts)

    assert combined.image_ids == whole.image_ids
    assert combined.content() == whole.content()
    assert [r.image_index for r in combined.runs_for("mulberry")] == list(range(len(grids)))
    for variant in whole.variants:
        a, b = combined.summaries[variant], whole.summaries[variant]
        assert (a.runs, a.succeeded, a.failed, a.trivial_images, a.mismatches) == \
            (b.runs, b.succeeded, b.failed, b.trivial_images, b.mismatches)
        durations = [r.duration for r in combined.runs_for(variant)]
        assert a.mean_duration == pytest.approx(np.mean(durations))
        assert a.total_duration == pytest.approx(sum(durations))
    assert combined.wall_time == pytest.approx(sum(p.wall_time for p in parts))


def test_combine_rejects_mismatched_variants():
    grids = make_grids()
    a = AblationHarness(grids, [DenseScanExtractor()]).run()
    b = AblationHarness(grids, [DenseScanExtractor(), MulberryExtractor()]).run()
    with pytest.raises(ValueError):
        AblationReport.combine([a, b])
    with pytest.raises(ValueError):
        AblationReport.combine([])


def test_dataframes():
    grids = make_grids()
    report = AblationHarness(grids, default_variants()).run()

    df = report.to_dataframe()
    assert len(df) == 3 * len(grids)
    assert set(df['variant']) == {"dense-scan", "mulberry", "ndimage-erosion"}
    assert df['trivial'].sum() == 3

    summary = report.summary_frame()
    assert list(summary.index) == report.variants
    assert (summary['runs'] == len(grids)).all()
