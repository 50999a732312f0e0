"""Transmission preview scene and orbit camera.

Builds a fixed scene (sun, floor, cube, transmissive window, HDR camera)
and orbits/dollies the camera around the origin from held arrow keys.

Usage:
    from scene_view import CameraController, MjScene, compose_scene

    scene = compose_scene()                      # pure description
    controller = CameraController.for_scene(scene)
    mj_scene = MjScene(scene)                    # compile for MuJoCo

    # every frame
    controller.update(frame)                     # FrameContext(input, timing)
    mj_scene.sync_camera(controller.camera)
"""

from scene_view.capabilities import Capabilities
from scene_view.composer import SceneComposer, compose_scene, describe_scene, scene_digest
from scene_view.controller import CameraController
from scene_view.frame import Action, FrameClock, FrameContext, FrameTiming, InputState, KeyLatch
from scene_view.mj_scene import MjScene
from scene_view.scene import SceneConfigError, SceneContext, SceneDescription

__all__ = [
    "Action",
    "CameraController",
    "Capabilities",
    "FrameClock",
    "FrameContext",
    "FrameTiming",
    "InputState",
    "KeyLatch",
    "MjScene",
    "SceneComposer",
    "SceneConfigError",
    "SceneContext",
    "SceneDescription",
    "compose_scene",
    "describe_scene",
    "scene_digest",
]
