from __future__ import annotations

import pytest

from reward_pool.errors import InputError, InsufficientFunds, InvalidState
from reward_pool.scheduler import PeriodPhase, RewardScheduler

DURATION = 1_000


def test_fresh_period_sets_rate_and_finish():
    scheduler = RewardScheduler(rewards_duration=DURATION)

    rate = scheduler.notify_reward_amount(10_500, now=50, available=10_500)

    assert rate == 10
    assert scheduler.reward_rate == 10
    assert scheduler.period_finish == 50 + DURATION


def test_top_up_folds_remaining_reward_into_rate():
    scheduler = RewardScheduler(rewards_duration=DURATION)
    scheduler.notify_reward_amount(10_000, now=0, available=10_000)

    # 400 seconds into the period, 600 * 10 units are still unreleased
    remaining = scheduler.remaining_reward(400)
    assert remaining == 6_000

    rate = scheduler.notify_reward_amount(4_000, now=400, available=20_000)
    assert rate == (4_000 + remaining) // DURATION
    assert scheduler.period_finish == 400 + DURATION


def test_notify_after_period_end_ignores_old_rate():
    scheduler = RewardScheduler(rewards_duration=DURATION)
    scheduler.notify_reward_amount(10_000, now=0, available=10_000)

    rate = scheduler.notify_reward_amount(2_000, now=DURATION, available=2_000)
    assert rate == 2


def test_insolvent_notify_is_rejected_without_change():
    scheduler = RewardScheduler(reward_rate=7, rewards_duration=DURATION)

    with pytest.raises(InsufficientFunds, match="Provided reward too high"):
        scheduler.notify_reward_amount(5_000, now=0, available=4_999)

    assert scheduler.reward_rate == 7
    assert scheduler.period_finish == 0


def test_guard_uses_rounded_rate():
    scheduler = RewardScheduler(rewards_duration=DURATION)
    # 1999 // 1000 == 1, so only 1000 units are ever promised
    assert scheduler.notify_reward_amount(1_999, now=0, available=1_000) == 1


def test_set_rewards_duration_requires_finished_period():
    scheduler = RewardScheduler(rewards_duration=DURATION)
    scheduler.notify_reward_amount(1_000, now=0, available=1_000)

    with pytest.raises(InvalidState):
        scheduler.set_rewards_duration(2_000, now=500)
    with pytest.raises(InvalidState):
        scheduler.set_rewards_duration(2_000, now=DURATION)

    scheduler.set_rewards_duration(2_000, now=DURATION + 1)
    assert scheduler.rewards_duration == 2_000


def test_set_rewards_duration_rejects_zero():
    scheduler = RewardScheduler(rewards_duration=DURATION)
    with pytest.raises(InputError):
        scheduler.set_rewards_duration(0, now=10)
    assert scheduler.rewards_duration == DURATION


def test_period_phases():
    scheduler = RewardScheduler(rewards_duration=DURATION)
    assert scheduler.phase(0) == PeriodPhase.IDLE

    scheduler.notify_reward_amount(5_000, now=100, available=5_000)
    assert scheduler.phase(100) == PeriodPhase.ACTIVE
    assert scheduler.phase(100 + DURATION - 1) == PeriodPhase.ACTIVE
    assert scheduler.phase(100 + DURATION) == PeriodPhase.ENDED

    scheduler.notify_reward_amount(5_000, now=3_000, available=5_000)
    assert scheduler.phase(3_000) == PeriodPhase.ACTIVE
