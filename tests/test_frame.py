"""Tests for held-key latching and frame timing."""

import pytest

from scene_view.frame import (
    KEY_DOWN,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_UP,
    Action,
    FrameClock,
    FrameContext,
    FrameTiming,
    InputState,
    KeyLatch,
)


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


@pytest.fixture
def clock():
    return FakeClock(100.0)


class TestInputState:
    def test_empty(self):
        state = InputState()
        assert not any(state.pressed(a) for a in Action)

    def test_of(self):
        state = InputState.of(Action.ZOOM_IN, Action.ROTATE_LEFT)
        assert state.pressed(Action.ZOOM_IN)
        assert state.pressed(Action.ROTATE_LEFT)
        assert not state.pressed(Action.ZOOM_OUT)

    def test_default_frame(self):
        frame = FrameContext()
        assert frame.timing.delta_seconds == 0.0
        assert frame.input.held == frozenset()


class TestKeyLatch:
    def test_default_bindings(self, clock):
        latch = KeyLatch(clock=clock)
        for key in (KEY_LEFT, KEY_RIGHT, KEY_UP, KEY_DOWN):
            latch.on_key(key)
        assert latch.snapshot().held == frozenset(Action)

    def test_up_zooms_in(self, clock):
        latch = KeyLatch(clock=clock)
        latch.on_key(KEY_UP)
        assert latch.snapshot() == InputState.of(Action.ZOOM_IN)

    def test_hold_window(self, clock):
        latch = KeyLatch(hold_window=0.6, clock=clock)
        latch.on_key(KEY_LEFT)

        clock.t += 0.5
        assert latch.snapshot().pressed(Action.ROTATE_LEFT)

        clock.t += 0.2
        assert not latch.snapshot().pressed(Action.ROTATE_LEFT)

    def test_default_window_bridges_repeat_delay(self, clock):
        # X11 waits 660 ms before the first auto-repeat
        latch = KeyLatch(clock=clock)
        latch.on_key(KEY_LEFT)
        clock.t += 0.66
        assert latch.snapshot().pressed(Action.ROTATE_LEFT)

    def test_repeat_extends_hold(self, clock):
        latch = KeyLatch(hold_window=0.6, clock=clock)
        latch.on_key(KEY_RIGHT)
        for _ in range(10):
            clock.t += 0.05
            latch.on_key(KEY_RIGHT)
        clock.t += 0.5
        assert latch.snapshot().pressed(Action.ROTATE_RIGHT)

    def test_unbound_key_ignored(self, clock):
        latch = KeyLatch(clock=clock)
        latch.on_key(ord("A"))
        latch.on_key(256)  # Escape
        assert latch.snapshot() == InputState()

    def test_custom_bindings(self, clock):
        latch = KeyLatch(bindings={ord("D"): Action.ROTATE_RIGHT}, clock=clock)
        latch.on_key(KEY_RIGHT)
        assert latch.snapshot() == InputState()
        latch.on_key(ord("D"))
        assert latch.snapshot() == InputState.of(Action.ROTATE_RIGHT)

    @pytest.mark.parametrize("window", [0.0, -1.0])
    def test_invalid_window(self, window):
        with pytest.raises(ValueError):
            KeyLatch(hold_window=window)


class TestFrameClock:
    def test_first_tick_is_zero(self, clock):
        assert FrameClock(clock=clock).tick().delta_seconds == 0.0

    def test_delta(self, clock):
        fc = FrameClock(clock=clock)
        fc.tick()
        clock.t += 0.016
        assert fc.tick().delta_seconds == pytest.approx(0.016)

    def test_stall_is_clamped(self, clock):
        fc = FrameClock(max_delta=0.1, clock=clock)
        fc.tick()
        clock.t += 5.0
        assert fc.tick().delta_seconds == 0.1

    def test_backwards_clock(self, clock):
        fc = FrameClock(clock=clock)
        fc.tick()
        clock.t -= 1.0
        assert fc.tick().delta_seconds == 0.0


class TestFrameTiming:
    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            FrameTiming(-0.01)
