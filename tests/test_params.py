"""Tests for the params module."""

import json

import pytest

from gridmarker.params import (
    DEFAULT_PARAMS,
    GridParams,
    SegmentationParams,
    load_params,
    save_params,
)


class TestGridParamsDefaults:
    def test_spacing_thresholds(self):
        p = GridParams()
        assert (p.cvx_thresh, p.cvy_thresh) == (0.55, 0.65)
        assert (p.soft_cvx_thresh, p.soft_cvy_thresh) == (0.60, 0.70)

    def test_coverage_thresholds(self):
        p = GridParams()
        assert (p.coverage_thresh, p.coverage_fallback, p.coverage_soft) == (
            0.45,
            0.55,
            0.50,
        )
        assert p.coverage_base == "image"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_PARAMS.cvx_thresh = 1.0  # type: ignore[misc]

    def test_bbox_preset(self):
        p = GridParams.bbox_based()
        assert p.coverage_base == "bbox"
        assert (p.coverage_thresh, p.coverage_fallback, p.coverage_soft) == (
            0.70,
            0.80,
            0.75,
        )

    def test_bbox_preset_overrides(self):
        p = GridParams.bbox_based(coverage_thresh=0.6, seed=3)
        assert p.coverage_thresh == 0.6
        assert p.seed == 3
        assert p.coverage_base == "bbox"


class TestGridParamsValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"grid_size": 4},
            {"cvx_thresh": 0.0},
            {"cvy_thresh": -0.1},
            {"coverage_thresh": 1.5},
            {"coverage_fallback": -0.01},
            {"isotropy_ratio": 2.0},
            {"coverage_base": "hull"},
            {"clusterer": "dbscan"},
            {"kmeans_attempts": 0},
            {"kmeans_max_iter": 0},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            GridParams(**kwargs)

    def test_accepts_sklearn(self):
        assert GridParams(clusterer="sklearn").clusterer == "sklearn"


class TestSegmentationParams:
    def test_defaults(self):
        p = SegmentationParams()
        assert (p.min_area_ratio, p.max_area_ratio) == (0.0006, 0.2)
        assert (p.max_width, p.max_height) == (640, 480)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_area_ratio": 0.3, "max_area_ratio": 0.2},
            {"min_area_ratio": -0.1},
            {"max_area_ratio": 1.5},
            {"max_width": 0},
            {"max_height": 0},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            SegmentationParams(**kwargs)


# ---------------------------------------------------------------------------
# JSON loading
# ---------------------------------------------------------------------------


class TestLoadParams:
    def test_none_returns_defaults(self):
        assert load_params(None) is DEFAULT_PARAMS

    def test_partial_override(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"coverage_thresh": 0.3, "cvx_thresh": 0.6}))
        p = load_params(path)
        assert p.coverage_thresh == 0.3
        assert p.cvx_thresh == 0.6
        assert p.cvy_thresh == DEFAULT_PARAMS.cvy_thresh

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_params(tmp_path / "nope.json")

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"coverage_threshold": 0.3}))
        with pytest.raises(ValueError, match="coverage_threshold"):
            load_params(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text("[0.3, 0.4]")
        with pytest.raises(ValueError):
            load_params(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"coverage_base": "hull"}))
        with pytest.raises(ValueError):
            load_params(path)

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "params.json"
        params = GridParams.bbox_based(seed=7)
        save_params(path, params)
        assert load_params(path) == params
