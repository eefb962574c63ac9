"""Tests für snap/loop.py – Snap-to-Studio."""

import threading
import time

import pytest

from snap import SnapLoop, SnapState
from studio_platform.base import WindowBounds

from conftest import FakeLocator, RecordingMover

STUDIO = WindowBounds(100, 50, 1200, 800)


@pytest.fixture
def locator():
    return FakeLocator(STUDIO)


@pytest.fixture
def mover():
    return RecordingMover()


def make_loop(locator, mover, enabled=True):
    return SnapLoop(SnapState(enabled=enabled), locator, mover, interval=0.001, width=420)


class TestSnapState:
    def test_default_disabled(self):
        assert SnapState().enabled is False

    def test_toggle(self):
        state = SnapState()
        assert state.toggle() is True
        assert state.is_enabled() is True
        assert state.toggle() is False

    def test_enable_disable(self):
        state = SnapState()
        state.enable()
        assert state.enabled is True
        state.disable()
        assert state.enabled is False


class TestTick:
    """Tests für tick() – ein Poll-Durchlauf."""

    def test_disabled_never_moves(self, locator, mover):
        loop = make_loop(locator, mover, enabled=False)

        for _ in range(5):
            assert loop.tick() is False

        assert mover.moves == []
        assert locator.calls == 0

    def test_moves_next_to_studio(self, locator, mover):
        loop = make_loop(locator, mover)

        assert loop.tick() is True
        assert mover.moves == [(1300, 50, 420, 800)]

    def test_unchanged_bounds_no_move(self, locator, mover):
        loop = make_loop(locator, mover)

        loop.tick()
        loop.tick()
        loop.tick()

        assert len(mover.moves) == 1

    def test_changed_bounds_move_again(self, locator, mover):
        loop = make_loop(locator, mover)

        loop.tick()
        locator.bounds = WindowBounds(0, 25, 1000, 700)
        loop.tick()

        assert mover.moves[-1] == (1000, 25, 420, 700)
        assert len(mover.moves) == 2

    def test_studio_not_found(self, mover):
        loop = make_loop(FakeLocator(None), mover)

        assert loop.tick() is False
        assert mover.moves == []

    def test_disable_stops_moves(self, locator, mover):
        loop = make_loop(locator, mover)
        loop.tick()

        loop.state.disable()
        locator.bounds = WindowBounds(0, 0, 640, 480)
        loop.tick()

        assert len(mover.moves) == 1

    def test_reenable_snaps_to_same_bounds(self, locator, mover):
        """Nach Aus/An wird auch bei unveränderten Bounds neu angedockt."""
        loop = make_loop(locator, mover)
        loop.tick()
        loop.state.disable()
        loop.tick()
        loop.state.enable()

        assert loop.tick() is True
        assert len(mover.moves) == 2

    def test_locator_exception_is_not_fatal(self, mover):
        class BrokenLocator:
            def studio_bounds(self):
                raise RuntimeError("CGWindowList")

        loop = make_loop(BrokenLocator(), mover)
        assert loop.tick() is False

    def test_disable_between_read_and_move(self, mover):
        """disable() während der Bounds-Abfrage verhindert den Move."""
        loop = None

        class DisablingLocator:
            def studio_bounds(self):
                loop.state.disable()
                return STUDIO

        loop = make_loop(DisablingLocator(), mover)
        assert loop.tick() is False
        assert mover.moves == []


class TestToggle:
    def test_enable_snaps_immediately(self, locator, mover):
        loop = make_loop(locator, mover, enabled=False)

        assert loop.toggle() is True
        assert mover.moves == [(1300, 50, 420, 800)]

    def test_enable_without_studio(self, mover):
        loop = make_loop(FakeLocator(None), mover, enabled=False)

        assert loop.toggle() is True
        assert mover.moves == []

    def test_disable(self, locator, mover):
        loop = make_loop(locator, mover, enabled=True)
        assert loop.toggle() is False

    def test_snap_now_disabled(self, locator, mover):
        loop = make_loop(locator, mover, enabled=False)
        assert loop.snap_now() is False
        assert mover.moves == []


class TestThread:
    def test_start_and_stop(self, locator):
        moved = threading.Event()

        class SignalingMover(RecordingMover):
            def move(self, *frame):
                super().move(*frame)
                moved.set()

        loop = make_loop(locator, SignalingMover())
        loop.start()
        try:
            assert loop.running is True
            assert moved.wait(2.0)
        finally:
            loop.stop()

        assert loop.running is False

    def test_no_moves_after_disable(self, locator, mover):
        loop = make_loop(locator, mover)
        loop.start()
        try:
            loop.state.disable()
            count = len(mover.moves)
            locator.bounds = WindowBounds(5, 5, 500, 500)
            time.sleep(0.05)
            assert len(mover.moves) == count
        finally:
            loop.stop()
