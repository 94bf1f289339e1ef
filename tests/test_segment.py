"""Tests for colour segmentation."""

import numpy as np
import pytest

from gridmarker.constants import COLOR_BANDS, PALETTE_BGR
from gridmarker.params import SegmentationParams
from gridmarker.segment import Patch, color_masks, resize_to_fit, segment_color_patches
from gridmarker.synth import grid_centers, render_marker

from conftest import AXIS, FRAME


def _canvas(w=400, h=400):
    return np.full((h, w, 3), 255, dtype=np.uint8)


def _square(img, x, y, size, bgr):
    img[y : y + size, x : x + size] = bgr
    return img


class TestPatch:
    def test_extents(self):
        p = Patch(color="red", box=(10, 20, 30, 40), center=(25.0, 40.0), area=1200.0, id=0)
        assert (p.x_min, p.y_min, p.x_max, p.y_max) == (10, 20, 40, 60)

    def test_corners_clockwise(self):
        p = Patch(color="red", box=(0, 0, 4, 2), center=(2.0, 1.0), area=8.0, id=0)
        assert p.corners() == [(0, 0), (4, 0), (4, 2), (0, 2)]


class TestResizeToFit:
    def test_small_image_untouched(self):
        img = _canvas(320, 240)
        assert resize_to_fit(img) is img

    def test_downscales_preserving_aspect(self):
        out = resize_to_fit(_canvas(1280, 960))
        assert out.shape == (480, 640, 3)

    def test_tall_image(self):
        out = resize_to_fit(_canvas(480, 960))
        assert out.shape == (480, 240, 3)

    def test_custom_limits(self):
        out = resize_to_fit(_canvas(400, 400), max_width=100, max_height=200)
        assert out.shape == (100, 100, 3)


class TestColorMasks:
    def test_one_mask_per_colour(self):
        masks = color_masks(_canvas())
        assert set(masks) == set(COLOR_BANDS)
        assert all(m.dtype == np.uint8 for m in masks.values())

    @pytest.mark.parametrize("color", list(PALETTE_BGR))
    def test_palette_colour_hits_own_mask(self, color):
        img = _square(_canvas(), 100, 100, 60, PALETTE_BGR[color])
        masks = color_masks(img)
        assert masks[color][130, 130] == 255
        others = [name for name in masks if name != color]
        assert all(masks[name][130, 130] == 0 for name in others)


class TestSegmentColorPatches:
    def test_blank_image(self):
        assert segment_color_patches(_canvas()) == []

    def test_single_square(self):
        img = _square(_canvas(), 100, 150, 60, PALETTE_BGR["blue"])
        patches = segment_color_patches(img)
        assert len(patches) == 1
        p = patches[0]
        assert p.color == "blue"
        assert p.id == 0
        assert p.center == pytest.approx((129.5, 179.5), abs=1.0)
        assert abs(p.box[2] - 60) <= 2
        assert abs(p.box[3] - 60) <= 2

    def test_rendered_marker(self):
        img = render_marker(FRAME, grid_centers(AXIS, AXIS), cell=100)
        patches = segment_color_patches(img)
        assert len(patches) == 9
        assert [p.id for p in patches] == list(range(9))
        centers = sorted((round(p.center[1]), round(p.center[0])) for p in patches)
        expected = sorted((y, x) for y in AXIS for x in AXIS)
        for got, want in zip(centers, expected):
            assert got == pytest.approx(want, abs=1)

    def test_tiny_blob_filtered(self):
        img = _square(_canvas(), 100, 100, 5, PALETTE_BGR["red"])
        assert segment_color_patches(img) == []

    def test_huge_blob_filtered(self):
        img = _square(_canvas(), 20, 20, 300, PALETTE_BGR["green"])
        assert segment_color_patches(img) == []

    def test_area_limits_configurable(self):
        img = _square(_canvas(), 20, 20, 300, PALETTE_BGR["green"])
        params = SegmentationParams(max_area_ratio=0.9)
        assert len(segment_color_patches(img, params)) == 1

    @pytest.mark.parametrize(
        "image",
        [np.zeros((0, 0, 3), np.uint8), np.zeros((10, 10), np.uint8)],
    )
    def test_rejects_non_bgr(self, image):
        with pytest.raises(ValueError):
            segment_color_patches(image)
