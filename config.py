"""
Centralized configuration for the preview viewer.

All tunables in one place.  CLI flags in main.py override fields.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from scene_view.controller import MAX_DISTANCE, MIN_DISTANCE
from scene_view.mj_scene import OFFSCREEN_HEIGHT, OFFSCREEN_WIDTH


@dataclass
class ControllerConfig:
    """Orbit camera configuration."""

    min_distance: float = MIN_DISTANCE  # Zoom-in is ignored at or below this
    max_distance: float = MAX_DISTANCE  # Zoom-out is ignored at or above this
    yaw_speed: float = 1.0  # Radians per second of held rotate key
    dolly_speed: float = 1.0  # e-folds of distance per second of held zoom key

    def __post_init__(self):
        if not 0 < self.min_distance < self.max_distance:
            raise ValueError(
                f"Need 0 < min_distance < max_distance, got "
                f"{self.min_distance}, {self.max_distance}"
            )
        if self.yaw_speed < 0 or self.dolly_speed < 0:
            raise ValueError("yaw_speed and dolly_speed must be >= 0")


@dataclass
class InputConfig:
    """Keyboard configuration."""

    # Seconds a key stays held after its last press/repeat event.  Must
    # bridge the OS key-repeat delay (660 ms on a stock X server).
    hold_window: float = 0.7
    # Largest frame step fed to the controller (stalls are clamped)
    max_frame_delta: float = 0.1

    def __post_init__(self):
        if self.hold_window <= 0:
            raise ValueError(f"hold_window must be > 0, got {self.hold_window}")
        if self.max_frame_delta <= 0:
            raise ValueError(
                f"max_frame_delta must be > 0, got {self.max_frame_delta}"
            )


@dataclass
class DisplayConfig:
    """Window and output configuration."""

    target_fps: float = 60.0
    allow_taa: bool = True  # False forces temporal AA off on any platform
    snapshot_width: int = 640
    snapshot_height: int = 480
    snapshot_step: float = 1 / 60  # Fixed controller step for scripted snapshots

    def __post_init__(self):
        if self.target_fps <= 0:
            raise ValueError(f"target_fps must be > 0, got {self.target_fps}")
        if not (
            0 < self.snapshot_width <= OFFSCREEN_WIDTH
            and 0 < self.snapshot_height <= OFFSCREEN_HEIGHT
        ):
            raise ValueError(
                f"Snapshot size must be within {OFFSCREEN_WIDTH}x{OFFSCREEN_HEIGHT}, "
                f"got {self.snapshot_width}x{self.snapshot_height}"
            )
        if self.snapshot_step <= 0:
            raise ValueError(f"snapshot_step must be > 0, got {self.snapshot_step}")

    @property
    def frame_period(self) -> float:
        return 1.0 / self.target_fps


@dataclass
class ViewerConfig:
    """Complete viewer configuration."""

    controller: ControllerConfig = field(default_factory=ControllerConfig)
    input: InputConfig = field(default_factory=InputConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_flat_dict(self) -> dict:
        """
        Convert to flat dict for logging.

        Prefixes each section's keys with section name.
        Example: controller.yaw_speed -> "controller/yaw_speed"
        """
        result = {}
        for section_name, section in [
            ("controller", self.controller),
            ("input", self.input),
            ("display", self.display),
        ]:
            for key, value in asdict(section).items():
                result[f"{section_name}/{key}"] = value
        return result

    @classmethod
    def for_headless(cls) -> ViewerConfig:
        """Config for offscreen snapshots: no temporal AA, default speeds."""
        return cls(display=DisplayConfig(allow_taa=False))
