"""Offscreen snapshots of the preview camera.

Optionally drives the camera controller with scripted held keys first, at
a fixed time step, so a snapshot can show the scene from any orbit pose
without a window.

Usage:
    uv run python main.py snapshot --hold rotate_right --seconds 1.5 --out orbit.png
"""

from __future__ import annotations

import logging
from pathlib import Path

import mujoco
from PIL import Image

from scene_view.controller import CameraController
from scene_view.frame import Action, FrameContext, FrameTiming, InputState
from scene_view.mj_scene import OFFSCREEN_HEIGHT, OFFSCREEN_WIDTH, MjScene

log = logging.getLogger(__name__)


def drive(
    controller: CameraController,
    held: tuple[Action, ...],
    seconds: float,
    step: float = 1 / 60,
) -> int:
    """Hold `held` for `seconds` of simulated frames. Returns frames run."""
    if step <= 0:
        raise ValueError(f"step must be > 0, got {step}")
    frames = int(round(seconds / step))
    frame = FrameContext(InputState.of(*held), FrameTiming(step))
    for _ in range(frames):
        controller.update(frame)
    return frames


def render_snapshot(
    mj_scene: MjScene,
    out_path: Path,
    width: int = OFFSCREEN_WIDTH,
    height: int = OFFSCREEN_HEIGHT,
) -> Path:
    """Render the scene camera to a PNG file."""
    if width > OFFSCREEN_WIDTH or height > OFFSCREEN_HEIGHT:
        raise ValueError(
            f"Snapshot {width}x{height} exceeds the offscreen buffer "
            f"({OFFSCREEN_WIDTH}x{OFFSCREEN_HEIGHT})"
        )

    renderer = mujoco.Renderer(mj_scene.model, height=height, width=width)
    try:
        renderer.update_scene(mj_scene.data, camera=mj_scene.camera_id)
        pixels = renderer.render().copy()
    finally:
        renderer.close()

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(pixels).save(out_path)
    log.info("Wrote %s (%dx%d)", out_path, width, height)
    return out_path
