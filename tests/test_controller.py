"""Tests for the orbit/dolly camera controller.

Validates that:
- No effective input leaves the camera untouched, bit for bit
- Orbit pivots on the origin and keeps distance and height
- Dolly scales distance exponentially and never crosses the origin
- The distance band gates input on the pre-frame distance
- The camera always looks at the origin after it moves
- Binding requires exactly one camera
"""

import math

import numpy as np
import pytest

from scene_view.composer import compose_scene
from scene_view.controller import (
    MAX_DISTANCE,
    MIN_DISTANCE,
    CameraController,
    rotate_about_up,
)
from scene_view.frame import Action, FrameContext, FrameTiming, InputState
from scene_view.scene import Camera, SceneConfigError, Transform


def _frame(*held, dt=0.1):
    return FrameContext(InputState.of(*held), FrameTiming(dt))


def _camera_at(x, y, z):
    transform = Transform.from_xyz(x, y, z).looking_at((0.0, 0.0, 0.0))
    return Camera.from_transform("test", transform)


def _assert_looks_at_origin(camera):
    expected = -camera.position / np.linalg.norm(camera.position)
    np.testing.assert_allclose(camera.forward, expected, atol=1e-9)


@pytest.fixture
def controller():
    return CameraController.for_scene(compose_scene())


# ---------------------------------------------------------------------------
# Idle frames
# ---------------------------------------------------------------------------


class TestIdle:
    def test_no_input_is_fixed_point(self, controller):
        cam = controller.camera
        pos_before = cam.position.copy()
        rot_before = cam.rotation.copy()

        moved = controller.update(_frame())

        assert moved is False
        assert np.array_equal(cam.position, pos_before)
        assert np.array_equal(cam.rotation, rot_before)

    def test_zero_delta_with_keys_held(self, controller):
        pose = controller.camera.pose()
        moved = controller.update(_frame(Action.ROTATE_RIGHT, Action.ZOOM_OUT, dt=0.0))
        assert moved is False
        assert controller.camera.pose() == pose

    def test_many_idle_frames(self, controller):
        pose = controller.camera.pose()
        for _ in range(1000):
            controller.update(_frame(dt=1 / 60))
        assert controller.camera.pose() == pose


# ---------------------------------------------------------------------------
# Orbit
# ---------------------------------------------------------------------------


class TestOrbit:
    def test_rotate_right_pivots_on_origin(self, controller):
        cam = controller.camera
        start = cam.position.copy()

        assert controller.update(_frame(Action.ROTATE_RIGHT, dt=0.1))

        np.testing.assert_allclose(cam.position, rotate_about_up(start, 0.1))
        assert cam.position[1] == pytest.approx(start[1])
        assert cam.distance == pytest.approx(7.5)
        _assert_looks_at_origin(cam)

    def test_rotate_left_is_inverse(self, controller):
        cam = controller.camera
        start = cam.position.copy()
        controller.update(_frame(Action.ROTATE_RIGHT, dt=0.3))
        controller.update(_frame(Action.ROTATE_LEFT, dt=0.3))
        np.testing.assert_allclose(cam.position, start, atol=1e-12)

    def test_right_wins_over_left(self):
        both = CameraController(_camera_at(1.0, 2.5, 7.0))
        right = CameraController(_camera_at(1.0, 2.5, 7.0))

        both.update(_frame(Action.ROTATE_LEFT, Action.ROTATE_RIGHT))
        right.update(_frame(Action.ROTATE_RIGHT))

        np.testing.assert_allclose(both.camera.position, right.camera.position)

    def test_full_turn_returns_home(self, controller):
        cam = controller.camera
        start = cam.position.copy()
        steps = 100
        for _ in range(steps):
            controller.update(_frame(Action.ROTATE_RIGHT, dt=2 * math.pi / steps))
        np.testing.assert_allclose(cam.position, start, atol=1e-9)

    def test_yaw_speed_scales_rotation(self):
        fast = CameraController(_camera_at(0.0, 1.0, 5.0), yaw_speed=2.0)
        slow = CameraController(_camera_at(0.0, 1.0, 5.0))
        fast.update(_frame(Action.ROTATE_RIGHT, dt=0.1))
        slow.update(_frame(Action.ROTATE_RIGHT, dt=0.2))
        np.testing.assert_allclose(fast.camera.position, slow.camera.position)

    def test_rotate_about_up_direction(self):
        # Positive angle is right handed about +Y: +X turns toward -Z
        np.testing.assert_allclose(
            rotate_about_up(np.array([1.0, 0.0, 0.0]), math.pi / 2),
            [0.0, 0.0, -1.0],
            atol=1e-12,
        )


# ---------------------------------------------------------------------------
# Dolly
# ---------------------------------------------------------------------------


class TestDolly:
    def test_zoom_out_is_exponential(self, controller):
        cam = controller.camera
        direction = cam.position / cam.distance

        controller.update(_frame(Action.ZOOM_OUT, dt=0.1))

        assert cam.distance == pytest.approx(7.5 * math.exp(0.1))
        np.testing.assert_allclose(cam.position / cam.distance, direction)
        _assert_looks_at_origin(cam)

    def test_zoom_in_is_exponential(self, controller):
        controller.update(_frame(Action.ZOOM_IN, dt=0.1))
        assert controller.camera.distance == pytest.approx(7.5 * math.exp(-0.1))

    def test_out_wins_over_in(self, controller):
        controller.update(_frame(Action.ZOOM_IN, Action.ZOOM_OUT, dt=0.1))
        assert controller.camera.distance == pytest.approx(7.5 * math.exp(0.1))

    def test_dolly_speed_scales_zoom(self):
        ctrl = CameraController(_camera_at(0.0, 0.0, 5.0), dolly_speed=0.5)
        ctrl.update(_frame(Action.ZOOM_OUT, dt=0.2))
        assert ctrl.camera.distance == pytest.approx(5.0 * math.exp(0.1))

    def test_orbit_and_dolly_same_frame(self, controller):
        cam = controller.camera
        start = cam.position.copy()
        controller.update(_frame(Action.ROTATE_RIGHT, Action.ZOOM_OUT, dt=0.1))
        expected = rotate_about_up(start * math.exp(0.1), 0.1)
        np.testing.assert_allclose(cam.position, expected)


# ---------------------------------------------------------------------------
# Distance band
# ---------------------------------------------------------------------------


class TestDistanceBand:
    def test_outer_limit_is_soft(self):
        ctrl = CameraController(_camera_at(0.0, 0.0, 24.9))
        dt = 0.1

        ctrl.update(_frame(Action.ZOOM_OUT, dt=dt))
        overshoot = ctrl.camera.distance
        assert overshoot > MAX_DISTANCE
        assert overshoot <= MAX_DISTANCE * math.exp(dt)

        for _ in range(50):
            assert ctrl.update(_frame(Action.ZOOM_OUT, dt=dt)) is False
        assert ctrl.camera.distance == overshoot

    def test_zoom_in_allowed_beyond_outer_limit(self):
        ctrl = CameraController(_camera_at(0.0, 0.0, 30.0))
        ctrl.update(_frame(Action.ZOOM_IN, dt=0.1))
        assert ctrl.camera.distance == pytest.approx(30.0 * math.exp(-0.1))

    def test_inner_limit_is_soft(self):
        ctrl = CameraController(_camera_at(0.0, 0.0, 2.05))
        dt = 0.1

        for _ in range(50):
            ctrl.update(_frame(Action.ZOOM_IN, dt=dt))

        assert ctrl.camera.distance <= MIN_DISTANCE
        assert ctrl.camera.distance >= MIN_DISTANCE * math.exp(-dt)

    def test_never_reaches_origin(self):
        ctrl = CameraController(_camera_at(0.0, 0.0, 2.5))
        for _ in range(10_000):
            ctrl.update(_frame(Action.ZOOM_IN, dt=0.1))
        assert ctrl.camera.distance > 0

    def test_long_session_stays_in_band(self, controller):
        dt = 0.05
        pattern = [Action.ZOOM_OUT] * 200 + [Action.ZOOM_IN] * 400
        for action in pattern:
            controller.update(_frame(action, Action.ROTATE_LEFT, dt=dt))
            d = controller.camera.distance
            assert MIN_DISTANCE * math.exp(-dt) <= d <= MAX_DISTANCE * math.exp(dt)
        _assert_looks_at_origin(controller.camera)

    def test_custom_band(self):
        ctrl = CameraController(_camera_at(0.0, 0.0, 5.0), max_distance=5.5)
        ctrl.update(_frame(Action.ZOOM_OUT, dt=0.2))
        ctrl.update(_frame(Action.ZOOM_OUT, dt=0.2))
        assert ctrl.camera.distance == pytest.approx(5.0 * math.exp(0.2))

    @pytest.mark.parametrize("lo,hi", [(0.0, 25.0), (5.0, 5.0), (10.0, 2.0)])
    def test_invalid_band(self, lo, hi):
        with pytest.raises(ValueError):
            CameraController(_camera_at(0.0, 0.0, 5.0), min_distance=lo, max_distance=hi)


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


class TestBinding:
    def test_binds_scene_camera(self):
        scene = compose_scene()
        ctrl = CameraController.for_scene(scene)
        assert ctrl.camera is scene.cameras[0]

    def test_updates_scene_camera_in_place(self):
        scene = compose_scene()
        ctrl = CameraController.for_scene(scene)
        ctrl.update(_frame(Action.ROTATE_RIGHT))
        assert scene.cameras[0].pose() == ctrl.camera.pose()

    def test_no_camera(self):
        scene = compose_scene()
        scene.cameras.clear()
        with pytest.raises(SceneConfigError):
            CameraController.for_scene(scene)

    def test_two_cameras(self):
        scene = compose_scene()
        scene.cameras.append(_camera_at(0.0, 1.0, 5.0))
        with pytest.raises(SceneConfigError):
            CameraController.for_scene(scene)

    def test_kwargs_forwarded(self):
        ctrl = CameraController.for_scene(compose_scene(), yaw_speed=3.0)
        assert ctrl.yaw_speed == 3.0
