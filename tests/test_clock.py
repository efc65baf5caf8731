from __future__ import annotations

import time

import pytest

from reward_pool.clock import ManualClock, SystemClock


def test_manual_clock_moves_only_forward():
    clock = ManualClock(100)
    assert clock.now() == 100
    assert clock.advance(5) == 105
    assert clock.set_time(200) == 200
    assert clock.advance(0) == 200

    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.set_time(199)
    assert clock.now() == 200


def test_manual_clock_rejects_negative_start():
    with pytest.raises(ValueError):
        ManualClock(-1)


def test_system_clock_tracks_wall_time():
    now = SystemClock().now()
    assert isinstance(now, int)
    assert abs(now - time.time()) < 5
