"""Scene description types handed to the rendering backend.

Nodes reference geometry and materials by handle into the registries of a
SceneContext, the same way a renderer's asset store would.  Everything
except the Camera is immutable once created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, NamedTuple, TypeVar

import numpy as np

from scene_view.primitives import (
    IDENTITY_QUAT,
    Y_AXIS,
    Geometry,
    Material,
    Quat,
    Vec3,
    forward_vector,
    quat_look_at,
)

T = TypeVar("T")


class SceneConfigError(ValueError):
    """The scene does not satisfy a startup precondition (e.g. camera count)."""


# ---------------------------------------------------------------------------
# Asset registries
# ---------------------------------------------------------------------------


class Handle(NamedTuple):
    """Typed index into an AssetRegistry."""

    kind: str
    index: int


class AssetRegistry(Generic[T]):
    """Append-only store handing out handles for added assets."""

    def __init__(self, kind: str):
        self.kind = kind
        self._items: list[T] = []

    def add(self, item: T) -> Handle:
        self._items.append(item)
        return Handle(self.kind, len(self._items) - 1)

    def get(self, handle: Handle) -> T:
        if handle.kind != self.kind:
            raise KeyError(f"{handle} is not a {self.kind} handle")
        return self._items[handle.index]

    def items(self) -> list[tuple[Handle, T]]:
        return [(Handle(self.kind, i), item) for i, item in enumerate(self._items)]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)


@dataclass
class SceneContext:
    """Registries the composer fills: mesh descriptors and materials."""

    meshes: AssetRegistry[Geometry] = field(
        default_factory=lambda: AssetRegistry("mesh")
    )
    materials: AssetRegistry[Material] = field(
        default_factory=lambda: AssetRegistry("material")
    )


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transform:
    translation: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quat = IDENTITY_QUAT
    scale: Vec3 = (1.0, 1.0, 1.0)

    @classmethod
    def from_xyz(cls, x: float, y: float, z: float) -> Transform:
        return cls(translation=(float(x), float(y), float(z)))

    def with_rotation(self, rotation) -> Transform:
        return Transform(
            translation=self.translation,
            rotation=tuple(float(c) for c in rotation),
            scale=self.scale,
        )

    def looking_at(self, target: Vec3, up: Vec3 = Y_AXIS) -> Transform:
        """Same translation, rotated so local -Z points at target."""
        return self.with_rotation(quat_look_at(self.translation, target, up))


@dataclass(frozen=True)
class ShadowFlags:
    cast: bool = True
    receive: bool = True


@dataclass(frozen=True)
class MeshNode:
    """A renderable surface: geometry + material placed by a transform."""

    name: str
    transform: Transform
    mesh: Handle
    material: Handle
    shadows: ShadowFlags = ShadowFlags()


@dataclass(frozen=True)
class DirectionalLight:
    """Sun-like light. Direction is the transform's local -Z.

    Attributes:
        color: RGB in [0, 1]
        illuminance: Lux
        shadow_depth_bias: Depth offset applied in the shadow map
        shadow_normal_bias: Offset along the surface normal, in texels
    """

    name: str
    transform: Transform
    color: Vec3
    illuminance: float
    shadows_enabled: bool = False
    shadow_depth_bias: float = 0.02
    shadow_normal_bias: float = 1.8

    @property
    def direction(self) -> np.ndarray:
        return forward_vector(self.transform.rotation)


TEMPORAL_AA = "temporal_aa"
BLOOM = "bloom"


@dataclass(frozen=True)
class RenderSettings:
    """Camera output settings. Set once at startup.

    Attributes:
        hdr: Render to a high-dynamic-range target
        exposure: Exposure compensation in EV
        post_saturation: Saturation multiplier applied after tone mapping
        tonemapping: Tone-mapping operator name
        post_effects: Optional effects (TEMPORAL_AA, BLOOM)
    """

    hdr: bool = False
    exposure: float = 0.0
    post_saturation: float = 1.0
    tonemapping: str = "tony_mc_mapface"
    post_effects: tuple[str, ...] = ()

    @property
    def temporal_aa(self) -> bool:
        return TEMPORAL_AA in self.post_effects

    @property
    def bloom(self) -> bool:
        return BLOOM in self.post_effects


@dataclass(eq=False)
class Camera:
    """The single controllable node.

    position and rotation are float arrays mutated in place by the
    camera controller; the rendering backend reads them every frame.
    """

    name: str
    position: np.ndarray
    rotation: np.ndarray
    fov_y: float = 45.0
    render: RenderSettings = RenderSettings()

    @classmethod
    def from_transform(cls, name: str, transform: Transform, **kwargs) -> Camera:
        return cls(
            name=name,
            position=np.array(transform.translation, dtype=float),
            rotation=np.array(transform.rotation, dtype=float),
            **kwargs,
        )

    @property
    def distance(self) -> float:
        """Distance from the world origin (the orbit pivot)."""
        return float(np.linalg.norm(self.position))

    @property
    def forward(self) -> np.ndarray:
        return forward_vector(self.rotation)

    def pose(self) -> tuple[tuple[float, ...], tuple[float, ...]]:
        """Immutable snapshot of (position, rotation)."""
        return tuple(self.position.tolist()), tuple(self.rotation.tolist())


@dataclass(frozen=True)
class WorldSettings:
    """Scene-wide render resources.

    Attributes:
        clear_color: Background RGB
        ambient_brightness: Ambient light level, 0 disables it
        shadow_map_size: Shadow map resolution in texels
        msaa_samples: Multisample count, 0 disables MSAA
    """

    clear_color: Vec3 = (0.0, 0.0, 0.0)
    ambient_brightness: float = 0.05
    shadow_map_size: int = 2048
    msaa_samples: int = 4


@dataclass
class SceneDescription:
    """Everything the composer produced, ready for a rendering backend."""

    context: SceneContext
    world: WorldSettings
    lights: list[DirectionalLight] = field(default_factory=list)
    meshes: list[MeshNode] = field(default_factory=list)
    cameras: list[Camera] = field(default_factory=list)

    @property
    def node_count(self) -> int:
        return len(self.lights) + len(self.meshes) + len(self.cameras)

    def single_camera(self) -> Camera:
        """The one controllable camera.

        Raises:
            SceneConfigError: if the scene has zero or several cameras.
        """
        if len(self.cameras) != 1:
            raise SceneConfigError(
                f"Expected exactly one camera, found {len(self.cameras)}"
            )
        return self.cameras[0]

    def geometry_of(self, node: MeshNode) -> Geometry:
        return self.context.meshes.get(node.mesh)

    def material_of(self, node: MeshNode) -> Material:
        return self.context.materials.get(node.material)
