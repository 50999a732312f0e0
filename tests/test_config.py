"""Tests for viewer configuration validation."""

import pytest

from config import ControllerConfig, DisplayConfig, InputConfig, ViewerConfig


class TestDefaults:
    def test_defaults_valid(self):
        cfg = ViewerConfig()
        assert cfg.controller.min_distance == 2.0
        assert cfg.controller.max_distance == 25.0
        assert cfg.input.hold_window == 0.7
        assert cfg.display.allow_taa
        assert cfg.display.frame_period == pytest.approx(1 / 60)

    def test_for_headless(self):
        cfg = ViewerConfig.for_headless()
        assert not cfg.display.allow_taa
        assert cfg.controller == ControllerConfig()

    def test_to_flat_dict(self):
        flat = ViewerConfig().to_flat_dict()
        assert flat["controller/yaw_speed"] == 1.0
        assert flat["input/hold_window"] == 0.7
        assert flat["display/allow_taa"] is True
        assert all("/" in key for key in flat)


class TestValidation:
    @pytest.mark.parametrize("lo,hi", [(0.0, 25.0), (30.0, 25.0), (-1.0, 5.0)])
    def test_bad_band(self, lo, hi):
        with pytest.raises(ValueError):
            ControllerConfig(min_distance=lo, max_distance=hi)

    def test_negative_speed(self):
        with pytest.raises(ValueError):
            ControllerConfig(yaw_speed=-1.0)

    def test_bad_hold_window(self):
        with pytest.raises(ValueError):
            InputConfig(hold_window=0.0)

    def test_bad_frame_delta(self):
        with pytest.raises(ValueError):
            InputConfig(max_frame_delta=-0.1)

    def test_bad_fps(self):
        with pytest.raises(ValueError):
            DisplayConfig(target_fps=0.0)

    @pytest.mark.parametrize("w,h", [(1280, 480), (640, 720), (0, 480)])
    def test_snapshot_size(self, w, h):
        with pytest.raises(ValueError):
            DisplayConfig(snapshot_width=w, snapshot_height=h)
