"""Randomised pool simulations for checking ledger invariants.

A simulation deploys a funded pool on a manual clock, then applies a seeded
random sequence of participant and owner actions. After every step it
records the observables the invariants are stated over, so a run can be
inspected as a DataFrame or checked with ``invariant_violations``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from . import pool_constants as const
from .clock import ManualClock
from .errors import PoolError
from .network import LocalNetwork

LOGGER = logging.getLogger(__name__)

ACTIONS = ("stake", "withdraw", "claim", "exit", "notify", "idle")
BPS = 10_000


@dataclass(frozen=True)
class SimulationConfig:
    seed: int = 7
    steps: int = 200
    participants: int = 4
    rewards_duration: int = 7 * const.SECONDS_PER_DAY
    reward_budget: int = 1_000_000 * const.UNIT
    reward_per_period: int = 50_000 * const.UNIT
    max_stake: int = 10_000 * const.UNIT
    max_gap_seconds: int = const.SECONDS_PER_DAY
    action_weights: tuple[float, ...] = (0.35, 0.2, 0.15, 0.05, 0.05, 0.2)


def _fraction(rng: np.random.Generator, amount: int) -> int:
    # amounts exceed int64, so draw a fraction in basis points instead
    return amount * int(rng.integers(0, BPS + 1)) // BPS


def run_simulation(config: SimulationConfig | None = None) -> pd.DataFrame:
    """Run one simulation and return one row per step."""
    cfg = config or SimulationConfig()
    if len(cfg.action_weights) != len(ACTIONS):
        raise ValueError(f"action_weights needs {len(ACTIONS)} entries")
    rng = np.random.default_rng(cfg.seed)
    weights = np.asarray(cfg.action_weights, dtype=float)
    weights = weights / weights.sum()

    network = LocalNetwork("simulation", ManualClock(1_700_000_000))
    owner = network.account("owner")
    participants = [network.account(f"participant-{i}") for i in range(cfg.participants)]

    stake_token = network.deploy_token(
        "Staking Token", "STK", deployer=owner, supply=const.DEFAULT_STAKE_TOKEN_SUPPLY
    )
    reward_token = network.deploy_token(
        "Reward Token", "RWD", deployer=owner, supply=const.DEFAULT_REWARD_TOKEN_SUPPLY
    )
    pool = network.deploy_pool(
        stake_token, reward_token, 0, deployer=owner, rewards_duration=cfg.rewards_duration
    )
    for participant in participants:
        stake_token.transfer(owner, participant, cfg.max_stake * 10)
        stake_token.approve(participant, pool.address, const.UINT256_MAX)
    reward_token.transfer(owner, pool.address, cfg.reward_budget)
    pool.notify_reward_amount(owner, cfg.reward_per_period)

    records = []
    for step in range(cfg.steps):
        action = ACTIONS[int(rng.choice(len(ACTIONS), p=weights))]
        actor = participants[int(rng.integers(len(participants)))]
        outcome = "ok"
        try:
            if action == "stake":
                pool.stake(actor, _fraction(rng, cfg.max_stake) or 1)
            elif action == "withdraw":
                pool.withdraw(actor, _fraction(rng, pool.staked_balance(actor)))
            elif action == "claim":
                pool.claim_reward(actor)
            elif action == "exit":
                pool.exit(actor)
            elif action == "notify":
                pool.notify_reward_amount(owner, cfg.reward_per_period)
        except PoolError as exc:
            outcome = exc.reason
        network.advance_time(int(rng.integers(0, cfg.max_gap_seconds + 1)))

        earned = [pool.earned(p) for p in participants]
        records.append(
            {
                "step": step,
                "timestamp": network.clock.now(),
                "action": action,
                "actor": actor,
                "outcome": outcome,
                "total_staked": pool.total_staked(),
                "sum_staked": sum(pool.staked_balance(p) for p in participants),
                "reward_per_token": pool.reward_per_token(),
                "sum_earned": sum(earned),
                "pool_reward_balance": reward_token.balance_of(pool.address),
                "reward_rate": pool.reward_rate(),
                "period_phase": pool.period_phase().value,
            }
        )
    LOGGER.info("Simulation finished %s steps (seed=%s)", cfg.steps, cfg.seed)
    df = pd.DataFrame(records)
    for column in (
        "total_staked",
        "sum_staked",
        "reward_per_token",
        "sum_earned",
        "pool_reward_balance",
        "reward_rate",
    ):
        df[column] = df[column].astype(object)
    return df


def invariant_violations(frame: pd.DataFrame) -> list[str]:
    """Describe every step where a ledger invariant does not hold."""
    problems: list[str] = []
    previous_rpt = 0
    for row in frame.itertuples():
        if row.total_staked != row.sum_staked:
            problems.append(
                f"step {row.step}: total_staked {row.total_staked} != sum {row.sum_staked}"
            )
        if row.reward_per_token < previous_rpt:
            problems.append(f"step {row.step}: reward_per_token decreased")
        if row.sum_earned > row.pool_reward_balance:
            problems.append(
                f"step {row.step}: earned {row.sum_earned} exceeds balance {row.pool_reward_balance}"
            )
        previous_rpt = row.reward_per_token
    return problems


def summarize_simulation(frame: pd.DataFrame) -> pd.DataFrame:
    """Count actions and outcomes of a simulation run."""
    if frame.empty:
        return pd.DataFrame(columns=["action", "outcome", "count"])
    return (
        frame.groupby(["action", "outcome"])
        .size()
        .reset_index(name="count")
        .sort_values(["action", "count"], ascending=[True, False])
        .reset_index(drop=True)
    )
