"""Launch the interactive transmission preview.

Controls:
    Left / Right: orbit the camera around the origin
    Up / Down:    dolly the camera in / out (2m to 25m)
    Esc:          quit (handled by MuJoCo viewer)
"""

import logging
import time
from dataclasses import asdict

import mujoco
import mujoco.viewer

from config import ViewerConfig
from scene_view import (
    CameraController,
    Capabilities,
    FrameClock,
    FrameContext,
    KeyLatch,
    MjScene,
    SceneComposer,
    SceneContext,
)

log = logging.getLogger(__name__)


def build_session(config: ViewerConfig):
    """Compose the scene and wire the controller and frame sources.

    Returns (mj_scene, controller, latch, clock).  Raises SceneConfigError
    if the scene does not hold exactly one camera.
    """
    capabilities = Capabilities.detect(allow_taa=config.display.allow_taa)
    scene = SceneComposer(capabilities).compose(SceneContext())
    controller = CameraController.for_scene(scene, **asdict(config.controller))
    mj_scene = MjScene(scene)
    latch = KeyLatch(hold_window=config.input.hold_window)
    clock = FrameClock(max_delta=config.input.max_frame_delta)
    return mj_scene, controller, latch, clock


def step_frame(
    mj_scene: MjScene,
    controller: CameraController,
    latch: KeyLatch,
    clock: FrameClock,
) -> bool:
    """Sample input and timing, move the camera, hand it to MuJoCo."""
    frame = FrameContext(input=latch.snapshot(), timing=clock.tick())
    moved = controller.update(frame)
    if moved:
        mj_scene.sync_camera(controller.camera)
    return moved


def run_view(config: ViewerConfig | None = None):
    """Open the MuJoCo viewer on the preview camera and run until closed."""
    config = config or ViewerConfig()
    mj_scene, controller, latch, clock = build_session(config)
    period = config.display.frame_period

    print("Controls: Left/Right=orbit, Up/Down=dolly, Esc=quit")
    log.info(
        "Camera %r at distance %.2f", mj_scene.camera_name, controller.camera.distance
    )

    with mujoco.viewer.launch_passive(
        mj_scene.model, mj_scene.data, key_callback=latch.on_key
    ) as viewer:
        mj_scene.attach_viewer(viewer)
        while viewer.is_running():
            frame_start = time.time()

            with viewer.lock():
                step_frame(mj_scene, controller, latch, clock)

            viewer.sync()
            elapsed = time.time() - frame_start
            remaining = period - elapsed
            if remaining > 0:
                time.sleep(remaining)
