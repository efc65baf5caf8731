"""Time-weighted reward-per-token accumulator.

``reward_per_token_stored`` is the cumulative reward earned by one unit of
stake since the pool was created, scaled by ``PRECISION``. An account's share
is its stake times the growth of the accumulator since the account was last
settled, so no operation ever iterates over all accounts.

Rounding is always floor division. Each settlement under-pays by at most one
base unit, never over-pays.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import pool_constants as const
from .errors import PoolArithmeticError
from .ledger import Account, UserLedger
from .scheduler import RewardScheduler


@dataclass
class RewardAccumulator:
    scheduler: RewardScheduler
    ledger: UserLedger
    reward_per_token_stored: int = 0
    last_update_time: int = 0

    def last_time_reward_applicable(self, now: int) -> int:
        return min(now, self.scheduler.period_finish)

    def _pending(self, now: int) -> tuple[int, int, int]:
        """Return (applicable time, accumulator increment, reward released)."""
        applicable = self.last_time_reward_applicable(now)
        total_staked = self.ledger.total_staked
        if total_staked == 0:
            return applicable, 0, 0
        elapsed = max(applicable - self.last_update_time, 0)
        released = elapsed * self.scheduler.reward_rate
        return applicable, released * const.PRECISION // total_staked, released

    def reward_per_token(self, now: int) -> int:
        """Accumulator value as if settled at ``now``, without persisting it."""
        _, increment, _ = self._pending(now)
        return self.reward_per_token_stored + increment

    def settle(self, now: int) -> int:
        """Fold the elapsed interval into the accumulator.

        Returns the reward released to stakers over the interval (zero when
        nothing is staked, since that time is never credited later).
        """
        applicable, increment, released = self._pending(now)
        stored = self.reward_per_token_stored + increment
        if stored > const.UINT256_MAX:
            raise PoolArithmeticError("Reward per token exceeds uint256")
        self.reward_per_token_stored = stored
        self.last_update_time = applicable
        return released

    def earned(self, account: Account, now: int) -> int:
        return accrued(account, self.reward_per_token(now))

    def settle_account(self, account: Account, now: int) -> int:
        """Settle globally, then bring ``account`` up to date.

        Returns the reward released by the global settlement.
        """
        released = self.settle(now)
        account.rewards = accrued(account, self.reward_per_token_stored)
        account.reward_per_token_paid = self.reward_per_token_stored
        return released


def accrued(account: Account, reward_per_token: int) -> int:
    """Unclaimed reward of ``account`` against an accumulator value."""
    delta = reward_per_token - account.reward_per_token_paid
    return account.rewards + account.staked_balance * delta // const.PRECISION
