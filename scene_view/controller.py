"""Orbit/dolly camera controller.

Every frame the camera's position is scaled radially and rotated about the
world up axis, both pivoting on the origin, then the camera is re-aimed at
the origin:

    yaw   = +dt if ROTATE_RIGHT, else -dt if ROTATE_LEFT, else 0
    dolly = +dt if ZOOM_OUT and dist < max, else -dt if ZOOM_IN and dist > min
    pos   = rotate_y(pos * exp(dolly), yaw)

Exponential dolly keeps the zoom rate proportional to distance and can
never reach or cross the origin.  The distance limits gate the input on
the pre-frame distance instead of clamping the result, so one frame may
overshoot a limit by at most dist * (exp(dt) - 1).

When both keys of a pair are held the first branch wins (right over left,
out over in).
"""

from __future__ import annotations

import logging
import math

import numpy as np

from scene_view.frame import Action, FrameContext
from scene_view.primitives import Y_AXIS, quat_look_at
from scene_view.scene import Camera, SceneDescription

log = logging.getLogger(__name__)

MIN_DISTANCE = 2.0
MAX_DISTANCE = 25.0
ORIGIN = (0.0, 0.0, 0.0)


class CameraController:
    """Drives one camera around the origin from held keys and frame time."""

    def __init__(
        self,
        camera: Camera,
        min_distance: float = MIN_DISTANCE,
        max_distance: float = MAX_DISTANCE,
        yaw_speed: float = 1.0,
        dolly_speed: float = 1.0,
    ):
        if not 0 < min_distance < max_distance:
            raise ValueError(
                f"Need 0 < min_distance < max_distance, got "
                f"{min_distance}, {max_distance}"
            )
        self.camera = camera
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.yaw_speed = yaw_speed
        self.dolly_speed = dolly_speed
        log.debug(
            "Controlling camera %r at distance %.2f (band %.1f-%.1f)",
            camera.name,
            camera.distance,
            min_distance,
            max_distance,
        )

    @classmethod
    def for_scene(cls, scene: SceneDescription, **kwargs) -> CameraController:
        """Bind to the scene's only camera.

        Raises:
            SceneConfigError: if the scene has zero or several cameras.
        """
        return cls(scene.single_camera(), **kwargs)

    # -------------------------------------------------------------------
    # Per-frame update
    # -------------------------------------------------------------------

    def yaw_delta(self, frame: FrameContext) -> float:
        dt = frame.timing.delta_seconds * self.yaw_speed
        if frame.input.pressed(Action.ROTATE_RIGHT):
            return dt
        elif frame.input.pressed(Action.ROTATE_LEFT):
            return -dt
        return 0.0

    def dolly_delta(self, frame: FrameContext) -> float:
        dt = frame.timing.delta_seconds * self.dolly_speed
        distance = self.camera.distance
        if frame.input.pressed(Action.ZOOM_OUT) and distance < self.max_distance:
            return dt
        elif frame.input.pressed(Action.ZOOM_IN) and distance > self.min_distance:
            return -dt
        return 0.0

    def update(self, frame: FrameContext) -> bool:
        """Apply one frame of input to the camera, in place.

        Returns True if the camera moved.  With no effective input the
        camera is left untouched, bit for bit.
        """
        yaw = self.yaw_delta(frame)
        dolly = self.dolly_delta(frame)
        if yaw == 0.0 and dolly == 0.0:
            return False

        cam = self.camera
        if dolly != 0.0:
            cam.position *= math.exp(dolly)
        if yaw != 0.0:
            cam.position[:] = rotate_about_up(cam.position, yaw)
        cam.rotation[:] = quat_look_at(cam.position, ORIGIN, Y_AXIS)
        return True


def rotate_about_up(v: np.ndarray, angle: float) -> np.ndarray:
    """Rotate a vector about world +Y by angle (radians, right handed)."""
    c, s = math.cos(angle), math.sin(angle)
    x, y, z = v
    return np.array([x * c + z * s, y, -x * s + z * c])
