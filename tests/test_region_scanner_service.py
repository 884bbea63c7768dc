import numpy as np
import pytest

from conftest import solid
from models.grid_spec import GridSpec
from models.image import Image
from services.region_scanner_service import RegionScannerService


scanner = RegionScannerService()


def test_grid_spec_rejects_empty_grid():
    with pytest.raises(ValueError):
        GridSpec(columns=0, rows=5)
    with pytest.raises(ValueError):
        GridSpec(columns=7, rows=0)


def test_finds_noisy_cells_and_respects_bounds(document):
    grid = GridSpec(columns=7, rows=5, variance_threshold=800)
    regions = scanner.scan(document, grid)

    assert len(regions) <= grid.columns * grid.rows
    assert {(r.x, r.y) for r in regions} == {(0, 0), (300, 100), (600, 400), (200, 300)}
    for r in regions:
        assert r.width > 0 and r.height > 0
        assert r.x + r.width <= document.width
        assert r.y + r.height <= document.height


def test_sorted_by_variance_descending(document):
    regions = scanner.scan(document, GridSpec(7, 7, 0))
    variances = [r.variance for r in regions]
    assert variances == sorted(variances, reverse=True)


def test_uniform_cell_has_zero_variance():
    img = Image(pixels=solid(40, 40, (12, 200, 77)))
    assert scanner.scan(img, GridSpec(2, 2, 0.001)) == []

    regions = scanner.scan(img, GridSpec(2, 2, 0))
    assert len(regions) == 4
    assert all(r.variance == 0 for r in regions)


def test_half_black_half_white_golden_variance():
    pixels = solid(10, 10, (0, 0, 0))
    pixels[:, 5:] = 255
    regions = scanner.scan(Image(pixels=pixels), GridSpec(1, 1, 1))

    assert len(regions) == 1
    assert regions[0].variance == 16256.25


def test_remainder_strip_is_ignored():
    # 25 px wide with 2 columns → two 12 px cells; the last column is never scanned
    pixels = solid(25, 10, (0, 0, 0))
    pixels[:, 24] = 255
    assert scanner.scan(Image(pixels=pixels), GridSpec(2, 1, 1)) == []


def test_ties_keep_row_major_order():
    pixels = solid(20, 20, (0, 0, 0))
    pixels[:, 5:10] = 255
    pixels[:, 15:20] = 255
    pixels[10:, :] = pixels[:10, :]
    regions = scanner.scan(Image(pixels=pixels), GridSpec(2, 2, 1))

    assert [(r.x, r.y) for r in regions] == [(0, 0), (10, 0), (0, 10), (10, 10)]


def test_image_smaller_than_grid_yields_nothing():
    img = Image(pixels=np.zeros((3, 3, 3), dtype=np.uint8))
    assert scanner.scan(img, GridSpec(7, 5, 0)) == []


def test_scan_is_idempotent_and_read_only(document):
    before = document.pixels.copy()
    grid = GridSpec(5, 9, 100)
    assert scanner.scan(document, grid) == scanner.scan(document, grid)
    assert np.array_equal(before, document.pixels)


def test_luminance_rounds_half_up():
    # 0.299 * 5 = 1.495 → 1 ; 0.587 * 1 + 0.114 * 8 = 1.499 → 1 ; pure white → 255
    pixels = np.array([[[5, 0, 0], [0, 1, 8], [255, 255, 255]]], dtype=np.uint8)
    lum = scanner.image_service.luminance(pixels)
    assert lum.tolist() == [[1, 1, 255]]
