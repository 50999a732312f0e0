"""Per-frame input and timing sampled by the application loop.

The MuJoCo viewer reports keys through a callback that fires on press and
on auto-repeat, never on release.  KeyLatch turns that event stream into
"currently held" state: a key counts as held while its most recent event
is younger than the hold window.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

# GLFW key codes (passed through unchanged by MuJoCo)
KEY_RIGHT = 262
KEY_LEFT = 263
KEY_DOWN = 264
KEY_UP = 265


class Action(Enum):
    """Logical camera inputs."""

    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"


DEFAULT_BINDINGS: dict[int, Action] = {
    KEY_LEFT: Action.ROTATE_LEFT,
    KEY_RIGHT: Action.ROTATE_RIGHT,
    KEY_UP: Action.ZOOM_IN,
    KEY_DOWN: Action.ZOOM_OUT,
}


@dataclass(frozen=True)
class InputState:
    """Logical actions held during one frame."""

    held: frozenset[Action] = frozenset()

    @classmethod
    def of(cls, *actions: Action) -> InputState:
        return cls(frozenset(actions))

    def pressed(self, action: Action) -> bool:
        return action in self.held


@dataclass(frozen=True)
class FrameTiming:
    delta_seconds: float = 0.0

    def __post_init__(self):
        if self.delta_seconds < 0:
            raise ValueError(f"delta_seconds must be >= 0, got {self.delta_seconds}")


@dataclass(frozen=True)
class FrameContext:
    """Everything the camera controller reads for one frame."""

    input: InputState = InputState()
    timing: FrameTiming = FrameTiming()


class KeyLatch:
    """Tracks which bound keys are held, from press/repeat events.

    on_key() may be called from the viewer thread; snapshot() from the
    main loop.
    """

    def __init__(
        self,
        bindings: dict[int, Action] | None = None,
        hold_window: float = 0.7,
        clock: Callable[[], float] = time.monotonic,
    ):
        if hold_window <= 0:
            raise ValueError(f"hold_window must be > 0, got {hold_window}")
        self.bindings = dict(DEFAULT_BINDINGS if bindings is None else bindings)
        self.hold_window = hold_window
        self._clock = clock
        self._last_seen: dict[Action, float] = {}
        self._lock = threading.Lock()

    def on_key(self, keycode: int) -> None:
        """Key callback for mujoco.viewer.launch_passive."""
        action = self.bindings.get(keycode)
        if action is None:
            return
        with self._lock:
            self._last_seen[action] = self._clock()

    def snapshot(self) -> InputState:
        now = self._clock()
        with self._lock:
            held = frozenset(
                action
                for action, seen in self._last_seen.items()
                if now - seen < self.hold_window
            )
        return InputState(held)


class FrameClock:
    """Monotonic frame timer.

    tick() returns the seconds since the previous tick, clamped to
    [0, max_delta] so a stalled frame (window drag, breakpoint) cannot
    move the camera by a huge step.
    """

    def __init__(
        self,
        max_delta: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_delta = max_delta
        self._clock = clock
        self._last: float | None = None

    def tick(self) -> FrameTiming:
        now = self._clock()
        if self._last is None:
            delta = 0.0
        else:
            delta = min(max(now - self._last, 0.0), self.max_delta)
        self._last = now
        return FrameTiming(delta)
