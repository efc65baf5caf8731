"""Staking pool: stake one asset, earn a time-weighted share of another.

Every mutating entry point runs as one transaction:

1. a nested mutating call (for example from inside an asset transfer) is
   rejected outright;
2. pool state, and the state of every asset that supports ``snapshot()``, is
   checkpointed;
3. the operation validates, settles the accumulator and the caller's
   account, applies its ledger change and performs asset transfers last;
4. any exception restores the checkpoint and is re-raised, so a failed call
   has no observable effect;
5. events are published only once the call has committed.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping

from . import pool_constants as const
from .access import AccessGuard
from .accumulator import RewardAccumulator
from .assets import Asset, check_amount, safe_transfer, safe_transfer_from
from .clock import Clock
from .errors import InputError, InsufficientFunds, ReentrancyError
from .events import (
    OwnershipTransferred,
    Paused,
    PoolEvent,
    RewardAdded,
    RewardPaid,
    RewardsDurationUpdated,
    Staked,
    Unpaused,
    Withdrawn,
)
from .ledger import Account, UserLedger
from .scheduler import PeriodPhase, RewardScheduler

LOGGER = logging.getLogger(__name__)

EventListener = Callable[[PoolEvent], None]


class StakingPool:
    """Reward distribution pool for one stake asset and one reward asset."""

    def __init__(
        self,
        stake_asset: Asset,
        reward_asset: Asset,
        initial_reward_rate: int,
        *,
        owner: str,
        clock: Clock,
        address: str,
        rewards_duration: int = const.DEFAULT_REWARDS_DURATION,
    ):
        check_amount(initial_reward_rate)
        if rewards_duration <= 0:
            raise InputError("Rewards duration must be positive")
        self.address = address
        self.stake_asset = stake_asset
        self.reward_asset = reward_asset
        self.clock = clock
        self.guard = AccessGuard(owner=owner)
        self.scheduler = RewardScheduler(
            reward_rate=initial_reward_rate, rewards_duration=rewards_duration
        )
        self.ledger = UserLedger()
        self.accumulator = RewardAccumulator(self.scheduler, self.ledger)
        # reward released by the accumulator and not paid out yet
        self._outstanding_rewards = 0
        # sum of settled, unclaimed rewards over all accounts
        self._credited_rewards = 0
        # most recent published events, capped at EVENT_LOG_SIZE
        self.events: list[PoolEvent] = []
        self._pending_events: list[PoolEvent] = []
        self._listeners: list[EventListener] = []
        self._entered = False

    def __repr__(self) -> str:
        return f"StakingPool({self.address})"

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _assets(self) -> list[Asset]:
        if self.stake_asset is self.reward_asset:
            return [self.stake_asset]
        return [self.stake_asset, self.reward_asset]

    def _checkpoint(self) -> tuple[Any, list[tuple[Any, Any]]]:
        # one deepcopy call keeps the accumulator pointing at the copied
        # scheduler and ledger
        state = copy.deepcopy(
            (
                self.guard,
                self.scheduler,
                self.ledger,
                self.accumulator,
                self._outstanding_rewards,
                self._credited_rewards,
            )
        )
        assets = [
            (asset, asset.snapshot()) for asset in self._assets() if hasattr(asset, "snapshot")
        ]
        return state, assets

    def _restore(self, checkpoint: tuple[Any, list[tuple[Any, Any]]]) -> None:
        state, assets = checkpoint
        (
            self.guard,
            self.scheduler,
            self.ledger,
            self.accumulator,
            self._outstanding_rewards,
            self._credited_rewards,
        ) = state
        for asset, snapshot in assets:
            asset.restore(snapshot)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[int]:
        if self._entered:
            raise ReentrancyError()
        self._entered = True
        checkpoint = self._checkpoint()
        try:
            yield self.clock.now()
        except Exception as exc:
            self._restore(checkpoint)
            self._pending_events.clear()
            LOGGER.debug("%s on %s reverted: %s", operation, self.address, exc)
            raise
        finally:
            self._entered = False
        self._publish()

    def _emit(self, event: PoolEvent) -> None:
        self._pending_events.append(event)

    def _publish(self) -> None:
        pending, self._pending_events = self._pending_events, []
        for event in pending:
            self.events.append(event)
            del self.events[: -const.EVENT_LOG_SIZE]
            LOGGER.info("%s %s", self.address, event.to_json())
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception as exc:  # the operation has already committed
                    LOGGER.warning("Event listener failed on %s: %s", event.name, exc)

    def subscribe(self, listener: EventListener) -> None:
        """Call ``listener`` with every event published after this point."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Settlement helpers
    # ------------------------------------------------------------------

    def _settle(self, address: str | None, now: int) -> None:
        if address is None or address not in self.ledger.accounts:
            released = self.accumulator.settle(now)
        else:
            account = self.ledger.accounts[address]
            before = account.rewards
            released = self.accumulator.settle_account(account, now)
            self._credited_rewards += account.rewards - before
        self._outstanding_rewards += released

    def _take_rewards(self, address: str) -> int:
        account = self.ledger.get(address)
        payable = account.rewards
        if payable == 0:
            return 0
        account.rewards = 0
        self._outstanding_rewards -= payable
        self._credited_rewards -= payable
        return payable

    def _release_rounding_dust(self) -> None:
        # with nothing staked every account is fully settled, so the floor
        # division remainders of past intervals are owed to nobody
        if self.ledger.total_staked == 0 and self._outstanding_rewards > self._credited_rewards:
            LOGGER.debug(
                "Releasing %s reward units of rounding dust on %s",
                self._outstanding_rewards - self._credited_rewards,
                self.address,
            )
            self._outstanding_rewards = self._credited_rewards

    def _committable_reward_balance(self) -> int:
        """Reward asset balance not already owed to stakers."""
        balance = self.reward_asset.balance_of(self.address)
        committed = self._outstanding_rewards
        if self.reward_asset is self.stake_asset:
            committed += self.ledger.total_staked
        return max(balance - committed, 0)

    # ------------------------------------------------------------------
    # Participant operations
    # ------------------------------------------------------------------

    def stake(self, caller: str, amount: int) -> None:
        with self._transaction("stake") as now:
            check_amount(amount)
            if amount == 0:
                raise InputError("Cannot stake 0")
            self.guard.require_not_paused()
            self.ledger.open(caller)
            self._settle(caller, now)
            self.ledger.credit(caller, amount)
            self._emit(Staked(caller, amount))
            safe_transfer_from(self.stake_asset, self.address, caller, self.address, amount)

    def withdraw(self, caller: str, amount: int) -> None:
        """Return ``amount`` of stake to ``caller``. Allowed while paused."""
        with self._transaction("withdraw") as now:
            check_amount(amount)
            if amount > self.ledger.get(caller).staked_balance:
                raise InsufficientFunds("Insufficient balance")
            self._settle(caller, now)
            self.ledger.debit(caller, amount)
            self._release_rounding_dust()
            if amount == 0:
                return
            self._emit(Withdrawn(caller, amount))
            safe_transfer(self.stake_asset, self.address, caller, amount)

    def claim_reward(self, caller: str) -> int:
        """Pay out the caller's settled rewards. Returns the amount paid."""
        with self._transaction("claim_reward") as now:
            self._settle(caller, now)
            payable = self._take_rewards(caller)
            if payable:
                self._emit(RewardPaid(caller, payable))
                safe_transfer(self.reward_asset, self.address, caller, payable)
        return payable

    def exit(self, caller: str) -> tuple[int, int]:
        """Withdraw the whole stake and claim rewards as a single operation.

        Returns ``(withdrawn, paid)``.
        """
        with self._transaction("exit") as now:
            self._settle(caller, now)
            amount = self.ledger.get(caller).staked_balance
            self.ledger.debit(caller, amount)
            self._release_rounding_dust()
            payable = self._take_rewards(caller)
            if amount:
                self._emit(Withdrawn(caller, amount))
            if payable:
                self._emit(RewardPaid(caller, payable))
            if amount:
                safe_transfer(self.stake_asset, self.address, caller, amount)
            if payable:
                safe_transfer(self.reward_asset, self.address, caller, payable)
        return amount, payable

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def notify_reward_amount(self, caller: str, amount: int) -> None:
        """Fund a new reward period, or top up the active one."""
        with self._transaction("notify_reward_amount") as now:
            self.guard.require_owner(caller)
            check_amount(amount)
            self._settle(None, now)
            rate = self.scheduler.notify_reward_amount(
                amount, now, self._committable_reward_balance()
            )
            self.accumulator.last_update_time = now
            LOGGER.debug(
                "Reward period on %s runs until %s at rate %s",
                self.address,
                self.scheduler.period_finish,
                rate,
            )
            self._emit(RewardAdded(amount))

    def set_rewards_duration(self, caller: str, new_duration: int) -> None:
        with self._transaction("set_rewards_duration") as now:
            self.guard.require_owner(caller)
            self.scheduler.set_rewards_duration(new_duration, now)
            self._emit(RewardsDurationUpdated(new_duration))

    def pause(self, caller: str) -> None:
        with self._transaction("pause"):
            self.guard.pause(caller)
            self._emit(Paused(caller))

    def unpause(self, caller: str) -> None:
        with self._transaction("unpause"):
            self.guard.unpause(caller)
            self._emit(Unpaused(caller))

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._transaction("transfer_ownership"):
            previous = self.guard.transfer_ownership(caller, new_owner)
            self._emit(OwnershipTransferred(previous, new_owner))

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def staked_balance(self, account: str) -> int:
        return self.ledger.get(account).staked_balance

    def earned(self, account: str) -> int:
        return self.accumulator.earned(self.ledger.get(account), self.clock.now())

    def total_staked(self) -> int:
        return self.ledger.total_staked

    def reward_rate(self) -> int:
        return self.scheduler.reward_rate

    def rewards_duration(self) -> int:
        return self.scheduler.rewards_duration

    def period_finish(self) -> int:
        return self.scheduler.period_finish

    def last_update_time(self) -> int:
        return self.accumulator.last_update_time

    def reward_per_token(self) -> int:
        return self.accumulator.reward_per_token(self.clock.now())

    def last_time_reward_applicable(self) -> int:
        return self.accumulator.last_time_reward_applicable(self.clock.now())

    def period_phase(self) -> PeriodPhase:
        return self.scheduler.phase(self.clock.now())

    def outstanding_rewards(self) -> int:
        """Reward released to stakers and not paid out yet, as of the last settlement.

        Includes the floor division remainders of each interval, which are
        released again once the total stake drops to zero.
        """
        return self._outstanding_rewards

    def owner(self) -> str:
        return self.guard.owner

    def paused(self) -> bool:
        return self.guard.paused

    def staking_token(self) -> Asset:
        return self.stake_asset

    def reward_token(self) -> Asset:
        return self.reward_asset

    def account(self, address: str) -> Account:
        """Copy of the stored ledger entry for ``address``."""
        return dataclasses.replace(self.ledger.get(address))

    def accounts(self) -> list[str]:
        return list(self.ledger.accounts)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "owner": self.guard.owner,
            "paused": self.guard.paused,
            "stake_asset": self.stake_asset.address,
            "reward_asset": self.reward_asset.address,
            "reward_rate": self.scheduler.reward_rate,
            "rewards_duration": self.scheduler.rewards_duration,
            "period_finish": self.scheduler.period_finish,
            "last_update_time": self.accumulator.last_update_time,
            "reward_per_token_stored": self.accumulator.reward_per_token_stored,
            "outstanding_rewards": self._outstanding_rewards,
            "credited_rewards": self._credited_rewards,
            "ledger": self.ledger.to_dict(),
        }

    @classmethod
    def from_dict(
        cls, payload: Mapping[str, Any], *, assets: Mapping[str, Asset], clock: Clock
    ) -> "StakingPool":
        pool = cls(
            assets[payload["stake_asset"]],
            assets[payload["reward_asset"]],
            int(payload["reward_rate"]),
            owner=payload["owner"],
            clock=clock,
            address=payload["address"],
            rewards_duration=int(payload["rewards_duration"]),
        )
        pool.guard.paused = bool(payload.get("paused", False))
        pool.scheduler.period_finish = int(payload["period_finish"])
        pool.ledger = UserLedger.from_dict(payload["ledger"])
        pool.accumulator = RewardAccumulator(
            pool.scheduler,
            pool.ledger,
            reward_per_token_stored=int(payload["reward_per_token_stored"]),
            last_update_time=int(payload["last_update_time"]),
        )
        pool._outstanding_rewards = int(payload.get("outstanding_rewards", 0))
        credited = payload.get("credited_rewards")
        if credited is None:
            credited = sum(acct.rewards for acct in pool.ledger.accounts.values())
        pool._credited_rewards = int(credited)
        return pool
