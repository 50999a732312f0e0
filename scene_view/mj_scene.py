"""MuJoCo backend: compiles a SceneDescription into an MjModel.

Two-phase workflow, like any MjSpec user:
  1. **Build time**: build_spec(description) creates an MjSpec with one
     material per registry entry, one geom per mesh node, the sun, and a
     fixed camera.
  2. **Runtime**: MjScene.sync_camera(camera) copies the controller's
     camera pose into model.cam_pos / model.cam_quat every frame.

Scene descriptions are Y-up; MuJoCo is Z-up.  Everything crossing into
MuJoCo goes through to_mj_vec / to_mj_quat (a +90 degree turn about X).

MuJoCo's OpenGL renderer has no HDR pipeline, tone mapping, bloom,
temporal AA, refraction, or per-geom shadow opt-out.  Those settings are
kept in the description and reported once as unsupported; transmission is
approximated with alpha blending and exposure by scaling the sun.  Temporal
AA falls back to MSAA.
"""

from __future__ import annotations

import logging
import math

import mujoco
import numpy as np

from scene_view.primitives import (
    IDENTITY_QUAT,
    X_AXIS,
    GeomKind,
    Geometry,
    Material,
    quat_from_axis_angle,
    quat_multiply,
)
from scene_view.scene import (
    Camera,
    DirectionalLight,
    MeshNode,
    SceneConfigError,
    SceneDescription,
)

log = logging.getLogger(__name__)

# Y-up scene frame -> MuJoCo Z-up world frame
_Y_UP_TO_Z_UP = quat_from_axis_angle(X_AXIS, math.pi / 2)

# MuJoCo planes face local +Z, scene planes face local +Y
_PLANE_LOCAL_FIX = quat_from_axis_angle(X_AXIS, -math.pi / 2)

# Quads become boxes this thin (half-thickness, meters)
QUAD_HALF_THICKNESS = 0.005
# Grid spacing MuJoCo uses when drawing planes
PLANE_GRID_SPACING = 0.5

# Illuminance (lux, after exposure) that maps to full MuJoCo diffuse
LUX_PER_UNIT_DIFFUSE = 4000.0
# Distance of the sun's position from the origin (only shadow framing uses it)
SUN_DISTANCE = 10.0

# A fully transmissive surface still shows this much of its base color
MIN_TRANSMISSIVE_ALPHA = 0.25

# Builtin skybox faces must be square
SKYBOX_FACE = 32

# MSAA used when the description hands anti-aliasing to temporal AA,
# which MuJoCo cannot run
MSAA_FALLBACK_SAMPLES = 4

# Default offscreen framebuffer of a compiled model
OFFSCREEN_WIDTH = 640
OFFSCREEN_HEIGHT = 480


# ---------------------------------------------------------------------------
# Frame conversion
# ---------------------------------------------------------------------------


def to_mj_vec(v) -> np.ndarray:
    """Y-up (x, y, z) to MuJoCo Z-up (x, -z, y)."""
    x, y, z = v
    return np.array([x, -z, y], dtype=float)


def to_mj_quat(q, local_fix=IDENTITY_QUAT) -> np.ndarray:
    """Y-up orientation to MuJoCo orientation (w, x, y, z)."""
    return quat_multiply(quat_multiply(_Y_UP_TO_Z_UP, q), local_fix)


def _local_fix(kind: GeomKind):
    return _PLANE_LOCAL_FIX if kind == GeomKind.PLANE else IDENTITY_QUAT


# ---------------------------------------------------------------------------
# Parameter mapping
# ---------------------------------------------------------------------------


def material_rgba(material: Material) -> list[float]:
    """Base color with alpha lowered by transmission."""
    alpha = 1.0 - material.transmission * (1.0 - MIN_TRANSMISSIVE_ALPHA)
    return [*material.base_color, alpha]


def geom_size(geometry: Geometry) -> list[float]:
    hx, hy, hz = geometry.half_extents
    if geometry.kind == GeomKind.PLANE:
        return [hx, hz, PLANE_GRID_SPACING]
    elif geometry.kind == GeomKind.QUAD:
        return [hx, hy, QUAD_HALF_THICKNESS]
    return [hx, hy, hz]


_GEOM_TYPES = {
    GeomKind.PLANE: mujoco.mjtGeom.mjGEOM_PLANE,
    GeomKind.CUBOID: mujoco.mjtGeom.mjGEOM_BOX,
    GeomKind.QUAD: mujoco.mjtGeom.mjGEOM_BOX,
}


def sun_diffuse(light: DirectionalLight, exposure: float = 0.0) -> list[float]:
    """Light color scaled by exposed illuminance, clipped to [0, 1]."""
    scale = light.illuminance * (2.0**exposure) / LUX_PER_UNIT_DIFFUSE
    return [float(np.clip(c * scale, 0.0, 1.0)) for c in light.color]


def msaa_samples(description: SceneDescription) -> int:
    """Multisample count for the compiled model.

    Falls back to MSAA when a camera requested temporal AA with MSAA off.
    """
    samples = description.world.msaa_samples
    if samples == 0 and any(cam.render.temporal_aa for cam in description.cameras):
        return MSAA_FALLBACK_SAMPLES
    return samples


def unsupported_features(description: SceneDescription) -> list[str]:
    """Settings in the description that MuJoCo will not render."""
    missing = []
    for cam in description.cameras:
        r = cam.render
        if r.hdr:
            missing.append(f"hdr output ({r.tonemapping} tone mapping)")
        if r.post_saturation != 1.0:
            missing.append("post saturation")
        missing.extend(r.post_effects)
    for node in description.meshes:
        mat = description.material_of(node)
        if mat.is_transmissive:
            missing.append(f"refraction on {node.name!r}")
        if not (node.shadows.cast and node.shadows.receive):
            missing.append(f"shadow opt-out on {node.name!r}")
    if any(light.shadows_enabled for light in description.lights):
        missing.append("shadow bias")
    return missing


# ---------------------------------------------------------------------------
# Build time
# ---------------------------------------------------------------------------


def _material_name(index: int) -> str:
    return f"material_{index}"


def build_spec(description: SceneDescription) -> mujoco.MjSpec:
    """Create an MjSpec holding every node of the description."""
    spec = mujoco.MjSpec()
    spec.modelname = "transmission_preview"
    world = description.world

    # Render resources
    spec.visual.quality.shadowsize = world.shadow_map_size
    spec.visual.quality.offsamples = msaa_samples(description)
    spec.visual.headlight.active = 0
    spec.visual.headlight.ambient = [world.ambient_brightness] * 3

    sky = spec.add_texture()
    sky.name = "clear_color"
    sky.type = mujoco.mjtTexture.mjTEXTURE_SKYBOX
    sky.builtin = mujoco.mjtBuiltin.mjBUILTIN_FLAT
    sky.rgb1 = list(world.clear_color)
    sky.rgb2 = list(world.clear_color)
    sky.width = SKYBOX_FACE
    sky.height = SKYBOX_FACE

    for handle, material in description.context.materials.items():
        mat = spec.add_material()
        mat.name = _material_name(handle.index)
        mat.rgba = material_rgba(material)
        mat.shininess = 1.0 - material.perceptual_roughness
        mat.specular = material.reflectance
        mat.reflectance = 0.0

    for node in description.meshes:
        _add_mesh_node(spec, description, node)

    exposure = description.cameras[0].render.exposure if description.cameras else 0.0
    for light in description.lights:
        _add_light(spec, light, exposure)

    for camera in description.cameras:
        _add_camera(spec, camera)

    return spec


def _add_mesh_node(spec, description: SceneDescription, node: MeshNode) -> None:
    geometry = description.geometry_of(node)
    geom = spec.worldbody.add_geom()
    geom.name = node.name
    geom.type = _GEOM_TYPES[geometry.kind]
    geom.size = geom_size(geometry)
    geom.pos = to_mj_vec(node.transform.translation)
    geom.quat = to_mj_quat(node.transform.rotation, _local_fix(geometry.kind))
    geom.material = _material_name(node.material.index)
    # Static preview scene: nothing collides
    geom.contype = 0
    geom.conaffinity = 0


def _add_light(spec, light: DirectionalLight, exposure: float) -> None:
    direction = light.direction
    mj_light = spec.worldbody.add_light()
    mj_light.name = light.name
    mj_light.type = mujoco.mjtLightType.mjLIGHT_DIRECTIONAL
    mj_light.pos = to_mj_vec(-direction * SUN_DISTANCE)
    mj_light.dir = to_mj_vec(direction)
    mj_light.castshadow = light.shadows_enabled
    mj_light.diffuse = sun_diffuse(light, exposure)
    mj_light.specular = [0.3, 0.3, 0.3]
    mj_light.ambient = [0.0, 0.0, 0.0]


def _add_camera(spec, camera: Camera) -> None:
    mj_cam = spec.worldbody.add_camera()
    mj_cam.name = camera.name
    mj_cam.pos = to_mj_vec(camera.position)
    mj_cam.quat = to_mj_quat(camera.rotation)
    mj_cam.fovy = camera.fov_y


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


class MjScene:
    """A compiled description plus the handle of its one camera."""

    def __init__(self, description: SceneDescription):
        self.description = description
        self.spec = build_spec(description)
        self.model = self.spec.compile()
        self.data = mujoco.MjData(self.model)
        self.camera_id = self._discover_camera()
        mujoco.mj_forward(self.model, self.data)

        missing = unsupported_features(description)
        if missing:
            log.info("MuJoCo renders without: %s", ", ".join(missing))

    def _discover_camera(self) -> int:
        """The compiled model must hold exactly one camera."""
        if self.model.ncam != 1:
            raise SceneConfigError(
                f"Expected exactly one camera in the compiled scene, "
                f"found {self.model.ncam}"
            )
        return 0

    @property
    def camera_name(self) -> str:
        return mujoco.mj_id2name(self.model, mujoco.mjtObj.mjOBJ_CAMERA, self.camera_id)

    def sync_camera(self, camera: Camera) -> None:
        """Copy the camera pose into the model and update kinematics."""
        self.model.cam_pos[self.camera_id] = to_mj_vec(camera.position)
        self.model.cam_quat[self.camera_id] = to_mj_quat(camera.rotation)
        mujoco.mj_forward(self.model, self.data)

    def attach_viewer(self, viewer) -> None:
        """Point a viewer at the scene camera instead of its free camera."""
        viewer.cam.type = mujoco.mjtCamera.mjCAMERA_FIXED
        viewer.cam.fixedcamid = self.camera_id
