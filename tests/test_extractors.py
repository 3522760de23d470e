import numpy as np
import pytest

from contour_ablation.extractors import (
    ContourExtractor,
    DenseScanExtractor,
    MulberryExtractor,
    available_extractors,
    create_extractor,
)
from contour_ablation.errors import ConfigurationError
from contour_ablation.grid import BinaryGrid

from generate_test_data import blob_mask, checkerboard_mask, noise_mask, ring_mask

VARIANTS = ["dense-scan", "mulberry", "ndimage-erosion", "opencv-erosion", "skimage-boundaries"]


def sample_masks():
    masks = [
        np.zeros((6, 9), dtype=bool),
        np.ones((3, 3), dtype=bool),
        np.ones((1, 1), dtype=bool),
        np.ones((1, 7), dtype=bool),
        np.ones((7, 1), dtype=bool),
        np.ones((12, 10), dtype=bool),
        ring_mask(),
        checkerboard_mask(),
    ]
    masks += [blob_mask((64, 64), seed=s) for s in range(6)]
    masks += [noise_mask((24, 31), seed=s, density=d) for s, d in [(0, 0.2), (1, 0.5), (2, 0.85)]]
    return masks


@pytest.fixture(params=VARIANTS)
def extractor(request):
    return create_extractor(request.param)


def test_registry_lists_all_variants():
    assert set(VARIANTS) <= set(available_extractors())
    for name in VARIANTS:
        ext = create_extractor(name)
        assert isinstance(ext, ContourExtractor)
        assert ext.name == name


def test_unknown_variant_is_configuration_error():
    with pytest.raises(ConfigurationError):
        create_extractor("canny")


def test_contour_is_subset_of_foreground(extractor):
    for mask in sample_masks():
        grid = BinaryGrid(mask)
        contour = extractor.extract(grid)
        assert contour <= set(grid.foreground_coordinates())


def test_matches_dense_scan(extractor):
    reference = DenseScanExtractor()
    for mask in sample_masks():
        grid = BinaryGrid(mask)
        assert extractor.extract(grid) == reference.extract(grid)


def test_idempotent(extractor):
    grid = BinaryGrid(blob_mask((64, 64), seed=11))
    assert extractor.extract(grid) == extractor.extract(grid)


@pytest.mark.parametrize("shape", [(1, 1), (4, 4), (17, 5)])
def test_empty_image(extractor, shape):
    grid = BinaryGrid(np.zeros(shape, dtype=bool))
    assert extractor.extract(grid) == frozenset()


def test_single_pixel(extractor):
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, 3] = True
    assert extractor.extract(BinaryGrid(mask)) == {(2, 3)}


def test_full_3x3_excludes_center(extractor):
    contour = extractor.extract(BinaryGrid(np.ones((3, 3), dtype=bool)))
    assert len(contour) == 8
    assert (1, 1) not in contour


def test_all_foreground_contour_is_image_border(extractor):
    contour = extractor.extract(BinaryGrid(np.ones((6, 8), dtype=bool)))
    expected = {(r, c) for r in range(6) for c in range(8) if r in (0, 5) or c in (0, 7)}
    assert contour == expected


def test_ring_has_inner_and_outer_contour(extractor):
    grid = BinaryGrid(ring_mask())
    contour = extractor.extract(grid)
    center = (20, 20)
    radii = {np.hypot(r - center[0], c - center[1]) for r, c in contour}
    assert min(radii) < 9
    assert max(radii) > 13


def test_diagonal_only_background_neighbour(extractor):
    mask = np.ones((5, 5), dtype=bool)
    mask[1, 1] = False
    contour = extractor.extract(BinaryGrid(mask))
    # (2, 2) touches the hole only diagonally
    assert (2, 2) in contour
    assert (3, 3) not in contour


def test_mulberry_registry_uses_config():
    class Config:
        mulberry_priority = "column-major"

    ext = create_extractor("mulberry", Config())
    assert isinstance(ext, MulberryExtractor)
    assert ext.priority == "column-major"
