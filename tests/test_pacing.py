"""
Pacing Clock Tests
==================

Target index derivation from elapsed time and pacing interval.
"""

from dataclasses import replace

import pytest

from framepace.models.control import pacing_interval_for
from framepace.stream.pacing import PacingClock, monotonic_us

from conftest import FPS_60_INTERVAL_US


class TestPacingInterval:
    """Tests for the fps -> microseconds conversion."""

    def test_sixty_fps(self):
        assert pacing_interval_for(60.0) == 16667

    def test_thirty_fps(self):
        assert pacing_interval_for(30.0) == 33333

    def test_one_fps(self):
        assert pacing_interval_for(1.0) == 1_000_000

    def test_never_below_one_microsecond(self):
        assert pacing_interval_for(5_000_000.0) == 1


class TestTargetIndex:
    """Tests for PacingClock.target_index."""

    def test_zero_at_start(self, session, pacing_clock, fake_time):
        fake_time.set(1_000)
        state = session.start(now_us=1_000)
        assert pacing_clock.target_index(state) == 0

    def test_floor_of_elapsed_over_interval(self, session, pacing_clock, fake_time):
        state = session.start(now_us=0)

        fake_time.set(50_000)
        assert pacing_clock.target_index(state) == 2

        fake_time.set(100_000)
        assert pacing_clock.target_index(state) == 5

        fake_time.set(FPS_60_INTERVAL_US * 6)
        assert pacing_clock.target_index(state) == 6

    def test_explicit_now_overrides_clock(self, session, pacing_clock):
        state = session.start(now_us=0)
        assert pacing_clock.target_index(state, now=FPS_60_INTERVAL_US * 10) == 10

    def test_frozen_while_stopped(self, session, pacing_clock, fake_time):
        fake_time.set(10_000_000)
        assert pacing_clock.target_index(session.state) == 0

    def test_rate_change_does_not_rebase_elapsed_time(self, session, pacing_clock, fake_time):
        state = session.start(now_us=0)
        fake_time.set(1_000_000)
        assert pacing_clock.target_index(state) == 59

        faster = replace(state, target_rate=120.0, pacing_interval_us=pacing_interval_for(120.0))
        # Full second re-paced at the new rate, not 59 + a fraction
        assert pacing_clock.target_index(faster) == 1_000_000 // 8333

    def test_clock_before_start_is_clamped(self, session, pacing_clock, fake_time):
        state = session.start(now_us=5_000)
        fake_time.set(1_000)
        assert pacing_clock.target_index(state) == 0


class TestDelayUntilNext:
    """Tests for PacingClock.delay_until_next."""

    def test_none_while_stopped(self, session, pacing_clock):
        assert pacing_clock.delay_until_next(session.state) is None

    def test_delay_to_next_frame(self, session, pacing_clock, fake_time):
        state = session.start(now_us=0)
        fake_time.set(10_000)
        assert pacing_clock.delay_until_next(state) == pytest.approx(
            (FPS_60_INTERVAL_US - 10_000) / 1_000_000
        )

    def test_zero_when_already_due(self, session, pacing_clock, fake_time):
        state = session.start(now_us=0)
        fake_time.set(FPS_60_INTERVAL_US * 3)
        assert pacing_clock.delay_until_next(state) == 0


def test_monotonic_us_does_not_go_backwards():
    first = monotonic_us()
    second = monotonic_us()
    assert second >= first


def test_default_clock_uses_monotonic_time():
    clock = PacingClock()
    assert clock.now() > 0
