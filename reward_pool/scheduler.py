"""Reward period state and the funding protocol.

A reward period distributes a funded amount linearly over
``rewards_duration`` seconds at ``reward_rate`` units per second. Funding an
active period folds the not-yet-released part of the current period into the
new rate instead of discarding it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from . import pool_constants as const
from .errors import InputError, InsufficientFunds, InvalidState, PoolArithmeticError


class PeriodPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class RewardScheduler:
    reward_rate: int = 0
    rewards_duration: int = const.DEFAULT_REWARDS_DURATION
    period_finish: int = 0

    def remaining_reward(self, now: int) -> int:
        """Reward still to be released by the current period at ``now``."""
        if now >= self.period_finish:
            return 0
        return (self.period_finish - now) * self.reward_rate

    def notify_reward_amount(self, amount: int, now: int, available: int) -> int:
        """Start or extend a reward period funded with ``amount``.

        ``available`` is the reward balance the pool can still commit. Returns
        the new reward rate.
        """
        if amount < 0:
            raise InputError(f"Negative reward amount {amount}")
        if now >= self.period_finish:
            new_rate = amount // self.rewards_duration
        else:
            new_rate = (amount + self.remaining_reward(now)) // self.rewards_duration

        # insolvency guard
        if new_rate * self.rewards_duration > available:
            raise InsufficientFunds("Provided reward too high")

        period_finish = now + self.rewards_duration
        if new_rate > const.UINT256_MAX or period_finish > const.UINT256_MAX:
            raise PoolArithmeticError("Reward schedule exceeds uint256")

        self.reward_rate = new_rate
        self.period_finish = period_finish
        return new_rate

    def set_rewards_duration(self, new_duration: int, now: int) -> None:
        if now <= self.period_finish:
            raise InvalidState(
                "Previous rewards period must be complete before changing the duration for the new period"
            )
        if new_duration <= 0:
            raise InputError("Rewards duration must be positive")
        if new_duration > const.UINT256_MAX:
            raise PoolArithmeticError("Rewards duration exceeds uint256")
        self.rewards_duration = new_duration

    def phase(self, now: int) -> PeriodPhase:
        if self.period_finish == 0 or self.reward_rate == 0:
            return PeriodPhase.IDLE
        if now < self.period_finish:
            return PeriodPhase.ACTIVE
        return PeriodPhase.ENDED
