"""Scene composer: builds the transmission preview scene description.

The scene is fixed and deterministic: one sun, a ground plane, a tilted
cube, a transmissive window panel, and one HDR camera.  The composer only
describes the scene; a backend (see scene_view.mj_scene) turns the
description into something renderable.

Usage:
    composer = SceneComposer(Capabilities.detect())
    scene = composer.compose(SceneContext())
    print(describe_scene(scene))
"""

from __future__ import annotations

import dataclasses
import hashlib
import logging

from scene_view import defaults
from scene_view.capabilities import Capabilities
from scene_view.primitives import (
    X_AXIS,
    Y_AXIS,
    Geometry,
    quat_from_axis_angle,
    quat_from_euler_xyz,
    quat_multiply,
)
from scene_view.scene import (
    BLOOM,
    TEMPORAL_AA,
    Camera,
    DirectionalLight,
    MeshNode,
    RenderSettings,
    SceneContext,
    SceneDescription,
    ShadowFlags,
    Transform,
    WorldSettings,
)

log = logging.getLogger(__name__)


class SceneComposer:
    """Creates every node of the preview scene from the defaults table."""

    def __init__(self, capabilities: Capabilities | None = None):
        self.capabilities = capabilities or Capabilities()

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------

    def compose(self, context: SceneContext | None = None) -> SceneDescription:
        """Register meshes/materials in `context` and return the scene.

        Cannot fail: all inputs are constants.  Node order is light, floor,
        cube, window, camera.
        """
        context = context or SceneContext()
        scene = SceneDescription(context=context, world=self._world())

        scene.lights.append(self._sun())
        scene.meshes.append(self._floor(context))
        scene.meshes.append(self._cube(context))
        scene.meshes.append(self._window(context))
        scene.cameras.append(self._camera())

        log.debug(
            "Composed scene: %d nodes, %d meshes, %d materials",
            scene.node_count,
            len(context.meshes),
            len(context.materials),
        )
        return scene

    # -------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------

    def _world(self) -> WorldSettings:
        if self.capabilities.temporal_aa:
            return dataclasses.replace(
                defaults.WORLD, msaa_samples=defaults.MSAA_SAMPLES_WITH_TAA
            )
        return defaults.WORLD

    def _sun(self) -> DirectionalLight:
        rotation = quat_multiply(
            quat_from_axis_angle(X_AXIS, defaults.SUN_TILT_X),
            quat_from_axis_angle(Y_AXIS, defaults.SUN_TURN_Y),
        )
        return DirectionalLight(
            name="sun",
            transform=Transform().with_rotation(rotation),
            color=defaults.SUN_COLOR,
            illuminance=defaults.SUN_ILLUMINANCE,
            shadows_enabled=True,
            shadow_depth_bias=defaults.SUN_DEPTH_BIAS,
            shadow_normal_bias=defaults.SUN_NORMAL_BIAS,
        )

    def _floor(self, context: SceneContext) -> MeshNode:
        return MeshNode(
            name="floor",
            transform=Transform.from_xyz(*defaults.FLOOR_POS),
            mesh=context.meshes.add(Geometry.plane(defaults.FLOOR_SIZE)),
            material=context.materials.add(defaults.FLOOR_MATERIAL),
        )

    def _cube(self, context: SceneContext) -> MeshNode:
        transform = Transform.from_xyz(*defaults.CUBE_POS).with_rotation(
            quat_from_euler_xyz(*defaults.CUBE_EULER_XYZ)
        )
        return MeshNode(
            name="cube",
            transform=transform,
            mesh=context.meshes.add(Geometry.cube(defaults.CUBE_SIZE)),
            material=context.materials.add(defaults.CUBE_MATERIAL),
        )

    def _window(self, context: SceneContext) -> MeshNode:
        transform = Transform.from_xyz(*defaults.WINDOW_POS).with_rotation(
            quat_from_euler_xyz(*defaults.WINDOW_EULER_XYZ)
        )
        return MeshNode(
            name="window",
            transform=transform,
            mesh=context.meshes.add(Geometry.quad(*defaults.WINDOW_SIZE)),
            material=context.materials.add(defaults.WINDOW_MATERIAL),
            shadows=defaults.WINDOW_SHADOWS,
        )

    def _camera(self) -> Camera:
        effects = [BLOOM]
        # TAA greatly improves the look of blurred transmission but is
        # optional: without it the scene is identical, only noisier.
        if self.capabilities.temporal_aa:
            effects.insert(0, TEMPORAL_AA)

        transform = Transform.from_xyz(*defaults.CAMERA_POS).looking_at(
            defaults.CAMERA_TARGET, Y_AXIS
        )
        return Camera.from_transform(
            defaults.CAMERA_NAME,
            transform,
            fov_y=defaults.CAMERA_FOV_Y,
            render=RenderSettings(
                hdr=defaults.CAMERA_HDR,
                exposure=defaults.CAMERA_EXPOSURE,
                post_saturation=defaults.CAMERA_SATURATION,
                tonemapping=defaults.CAMERA_TONEMAPPING,
                post_effects=tuple(effects),
            ),
        )


def compose_scene(capabilities: Capabilities | None = None) -> SceneDescription:
    """Compose the preview scene into fresh registries."""
    return SceneComposer(capabilities).compose(SceneContext())


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------


def _fmt_vec(v) -> str:
    return "(" + ", ".join(f"{float(c):+.2f}" for c in v) + ")"


def _fmt_shadows(flags: ShadowFlags) -> str:
    if flags.cast and flags.receive:
        return "shadows"
    if not flags.cast and not flags.receive:
        return "no shadows"
    return "casts only" if flags.cast else "receives only"


def describe_node(scene: SceneDescription, node: MeshNode) -> str:
    """One-line description of a mesh node."""
    geom = scene.geometry_of(node)
    mat = scene.material_of(node)
    parts = [
        f"{node.name} {geom.kind.value} {_fmt_vec(geom.half_extents)}",
        f"at {_fmt_vec(node.transform.translation)}",
        f"color {_fmt_vec(mat.base_color)} rough {mat.perceptual_roughness:.2f}",
    ]
    if mat.is_transmissive:
        parts.append(f"transmission {mat.transmission:.2f} ior {mat.ior:.2f}")
    parts.append(_fmt_shadows(node.shadows))
    return "  ".join(parts)


def describe_scene(scene: SceneDescription) -> str:
    """Multi-line textual description of a composed scene.

    Example output:
        Scene #3fa29c  5 nodes
          light  sun dir (+0.00, -0.95, -0.32) 15000 lux  shadows
          [0] floor plane (+50.00, +0.00, +50.00)  at (+0.00, +0.50, -3.00) ...
          camera preview at (+1.00, +2.50, +7.00)  hdr exposure -2.0  [temporal_aa, bloom]
    """
    lines = [f"Scene #{scene_digest(scene)}  {scene.node_count} nodes"]

    for light in scene.lights:
        shadow = "shadows" if light.shadows_enabled else "no shadows"
        lines.append(
            f"  light  {light.name} dir {_fmt_vec(light.direction)} "
            f"{light.illuminance:.0f} lux  {shadow}"
        )

    for i, node in enumerate(scene.meshes):
        lines.append(f"  [{i}] {describe_node(scene, node)}")

    for cam in scene.cameras:
        r = cam.render
        effects = ", ".join(r.post_effects) or "none"
        lines.append(
            f"  camera {cam.name} at {_fmt_vec(cam.position)}  "
            f"{'hdr' if r.hdr else 'ldr'} exposure {r.exposure:+.1f} "
            f"{r.tonemapping}  [{effects}]"
        )

    return "\n".join(lines)


def scene_digest(scene: SceneDescription) -> str:
    """Short hex fingerprint of the scene contents (6 chars).

    Equal for any two compositions with the same nodes, materials and
    transforms.  Values are rounded so float noise does not change it.
    """
    h = hashlib.sha1()

    def feed(*values):
        for v in values:
            if isinstance(v, float):
                v = round(v, 9)
            h.update(repr(v).encode())

    def feed_vec(vec):
        feed(*(float(c) for c in vec))

    w = scene.world
    feed_vec(w.clear_color)
    feed(float(w.ambient_brightness), w.shadow_map_size, w.msaa_samples)
    for light in scene.lights:
        feed(light.name, float(light.illuminance), light.shadows_enabled)
        feed_vec(light.transform.rotation)
        feed_vec(light.color)
    for node in scene.meshes:
        geom = scene.geometry_of(node)
        feed(node.name, geom.kind.value, node.shadows.cast, node.shadows.receive)
        feed_vec(geom.half_extents)
        feed_vec(node.transform.translation)
        feed_vec(node.transform.rotation)
        feed(*(float(getattr(scene.material_of(node), f)) for f in _MATERIAL_SCALARS))
        feed_vec(scene.material_of(node).base_color)
    for cam in scene.cameras:
        feed(cam.name, float(cam.fov_y), cam.render)
        feed_vec(cam.position)
        feed_vec(cam.rotation)

    return h.hexdigest()[:6]


_MATERIAL_SCALARS = (
    "perceptual_roughness",
    "reflectance",
    "metallic",
    "diffuse_transmission",
    "specular_transmission",
    "thickness",
    "ior",
)
