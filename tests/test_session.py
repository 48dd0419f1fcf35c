"""
Session Tests
=============

Snapshot invariants and atomic command application.
"""

import pytest

from framepace.models.control import ResizeCommand
from framepace.models.session import SessionState

from conftest import fake_pool_builder


class TestSessionState:
    """Tests for SessionState invariants."""

    def test_initial_state(self):
        state = SessionState.initial(1024, 1024, 60.0, fake_pool_builder(1024, 1024))
        assert state.pacing_interval_us == 16667
        assert state.playing is False
        assert state.sent_index == 0
        assert state.target_index == 0
        assert state.behind == 0

    def test_sent_cannot_exceed_target(self):
        with pytest.raises(ValueError):
            SessionState(
                width=1,
                height=1,
                target_rate=1.0,
                pacing_interval_us=1_000_000,
                pool=fake_pool_builder(1, 1),
                target_index=1,
                sent_index=2,
            )


class TestSession:
    """Tests for Session mutators."""

    def test_resize_swaps_everything_at_once(self, session):
        old_pool = session.state.pool
        new_pool = fake_pool_builder(8, 4, epoch=1)

        state = session.commit_resize(ResizeCommand(width=8, height=4, fps=24.0), new_pool)

        assert state is session.state
        assert (state.width, state.height, state.target_rate) == (8, 4, 24.0)
        assert state.pacing_interval_us == 41667
        assert state.pool is new_pool
        # The previous pool is untouched for anyone still holding it
        assert old_pool.frames[0] == b"e0-64x48-0"

    def test_resize_rejects_mismatched_pool(self, session):
        before = session.state
        with pytest.raises(ValueError):
            session.commit_resize(
                ResizeCommand(width=8, height=4, fps=24.0),
                fake_pool_builder(4, 8, epoch=1),
            )
        assert session.state is before

    def test_observe_target_ignored_while_stopped(self, session):
        session.observe_target(10)
        assert session.state.target_index == 0

    def test_observe_target_never_decreases(self, session):
        session.start(now_us=0)
        session.observe_target(10)
        session.observe_target(4)
        assert session.state.target_index == 10

    def test_claim_advances_by_one(self, session):
        session.start(now_us=0)
        session.observe_target(2)

        assert session.claim_next() == (1, session.state.pool.frames[1])
        assert session.claim_next() == (2, session.state.pool.frames[2])
        assert session.claim_next() is None
        assert session.state.sent_index == 2

    def test_claim_after_close_returns_none(self, session):
        session.start(now_us=0)
        session.observe_target(5)
        session.close()
        assert session.closed is True
        assert session.claim_next() is None
