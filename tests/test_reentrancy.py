from __future__ import annotations

import pytest

from reward_pool import pool_constants as const
from reward_pool.assets import SimpleToken
from reward_pool.clock import ManualClock
from reward_pool.errors import InsufficientFunds, ReentrancyError, TransferFailed
from reward_pool.network import derive_address
from reward_pool.pool import StakingPool

UNIT = const.UNIT
DAY = const.SECONDS_PER_DAY

OWNER = derive_address("test", "owner")
ALICE = derive_address("test", "alice")


class HookedToken(SimpleToken):
    """Token that runs ``hook`` before every balance change."""

    hook = None

    def transfer(self, sender, recipient, amount):
        if self.hook is not None:
            self.hook()
        return super().transfer(sender, recipient, amount)

    def transfer_from(self, spender, owner, recipient, amount):
        if self.hook is not None:
            self.hook()
        return super().transfer_from(spender, owner, recipient, amount)


class RefusingToken(SimpleToken):
    """Token that reports failure instead of raising."""

    refuse = False

    def transfer(self, sender, recipient, amount):
        if self.refuse:
            return False
        return super().transfer(sender, recipient, amount)


def _token(cls, symbol):
    return cls(
        symbol,
        symbol,
        address=derive_address("test", symbol),
        deployer=OWNER,
        supply=const.DEFAULT_STAKE_TOKEN_SUPPLY,
    )


def _pool(stake, reward):
    clock = ManualClock(1_000)
    pool = StakingPool(
        stake, reward, 0, owner=OWNER, clock=clock, address=derive_address("test", "pool")
    )
    stake.transfer(OWNER, ALICE, 1_000 * UNIT)
    reward.transfer(OWNER, pool.address, 30 * DAY * UNIT)
    pool.notify_reward_amount(OWNER, 30 * DAY * UNIT)
    return pool, clock


def test_reentrant_call_reverts_outer_operation():
    stake = _token(HookedToken, "STK")
    reward = _token(SimpleToken, "RWD")
    pool, _ = _pool(stake, reward)
    stake.approve(ALICE, pool.address, 100 * UNIT)

    stake.hook = lambda: pool.claim_reward(ALICE)
    with pytest.raises(ReentrancyError):
        pool.stake(ALICE, 100 * UNIT)

    assert pool.staked_balance(ALICE) == 0
    assert pool.total_staked() == 0
    assert stake.balance_of(ALICE) == 1_000 * UNIT
    assert stake.allowance(ALICE, pool.address) == 100 * UNIT

    # the guard is released after the failed call
    stake.hook = None
    pool.stake(ALICE, 100 * UNIT)
    assert pool.staked_balance(ALICE) == 100 * UNIT


def test_callback_sees_settled_state_and_cannot_claim_twice():
    stake = _token(SimpleToken, "STK")
    reward = _token(HookedToken, "RWD")
    pool, clock = _pool(stake, reward)
    stake.approve(ALICE, pool.address, 100 * UNIT)
    pool.stake(ALICE, 100 * UNIT)
    clock.advance(DAY)

    seen = []

    def claim_again():
        seen.append(pool.earned(ALICE))
        try:
            pool.claim_reward(ALICE)
        except ReentrancyError:
            seen.append("blocked")

    reward.hook = claim_again
    paid = pool.claim_reward(ALICE)

    assert paid == DAY * UNIT
    assert seen == [0, "blocked"]
    assert reward.balance_of(ALICE) == paid


def test_transfer_returning_false_reverts():
    stake = _token(SimpleToken, "STK")
    reward = _token(RefusingToken, "RWD")
    pool, clock = _pool(stake, reward)
    stake.approve(ALICE, pool.address, 100 * UNIT)
    pool.stake(ALICE, 100 * UNIT)
    clock.advance(DAY)
    earned = pool.earned(ALICE)
    events_before = len(pool.events)

    reward.refuse = True
    with pytest.raises(TransferFailed):
        pool.claim_reward(ALICE)

    assert pool.earned(ALICE) == earned
    assert len(pool.events) == events_before


def test_exit_reverts_stake_transfer_when_reward_transfer_fails():
    stake = _token(SimpleToken, "STK")
    reward = _token(RefusingToken, "RWD")
    pool, clock = _pool(stake, reward)
    stake.approve(ALICE, pool.address, 100 * UNIT)
    pool.stake(ALICE, 100 * UNIT)
    clock.advance(DAY)

    reward.refuse = True
    with pytest.raises(TransferFailed):
        pool.exit(ALICE)

    assert pool.staked_balance(ALICE) == 100 * UNIT
    assert pool.total_staked() == 100 * UNIT
    assert stake.balance_of(ALICE) == 900 * UNIT
    assert stake.balance_of(pool.address) == 100 * UNIT

    reward.refuse = False
    assert pool.exit(ALICE) == (100 * UNIT, DAY * UNIT)


def test_failed_withdraw_keeps_ledger_intact():
    stake = _token(SimpleToken, "STK")
    reward = _token(SimpleToken, "RWD")
    pool, clock = _pool(stake, reward)
    stake.approve(ALICE, pool.address, 100 * UNIT)
    pool.stake(ALICE, 100 * UNIT)
    clock.advance(DAY)
    snapshot = pool.to_dict()

    with pytest.raises(InsufficientFunds):
        pool.withdraw(ALICE, 101 * UNIT)

    assert pool.to_dict() == snapshot
