"""Configuration helpers for the reward pool tooling."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from . import pool_constants as const

load_dotenv()

DATA_DIR = Path(os.getenv("REWARD_POOL_DATA_DIR", "data"))
STATE_DIR = DATA_DIR / "networks"
DEPLOYMENTS_DIR = Path(os.getenv("REWARD_POOL_DEPLOYMENTS_DIR", "deployments"))
OUT_DIR = Path("out")

DEFAULT_NETWORK = os.getenv("STAKING_NETWORK", "localnet")


def _int_from_env(name: str, default: int) -> int:
    env_value = os.getenv(name)
    if env_value:
        try:
            return int(env_value)
        except ValueError:
            pass
    return default


@dataclass(frozen=True)
class PoolParameters:
    """Parameters the deploy tooling hands to a new pool.

    - reward_rate: initial reward rate (reward units per second).
    - rewards_duration: length of each reward period in seconds.
    - reward_budget: reward units transferred into the pool after deployment.
    - initial_reward: amount passed to notify_reward_amount to open period one.
    """

    reward_rate: int = const.DEFAULT_INITIAL_REWARD_RATE
    rewards_duration: int = const.DEFAULT_REWARDS_DURATION
    reward_budget: int = const.DEFAULT_REWARD_BUDGET
    initial_reward: int = const.DEFAULT_INITIAL_REWARD


def default_pool_parameters() -> PoolParameters:
    """Pool parameters with environment overrides applied."""
    return PoolParameters(
        reward_rate=_int_from_env("INITIAL_REWARD_RATE", const.DEFAULT_INITIAL_REWARD_RATE),
        rewards_duration=_int_from_env("REWARDS_DURATION_SECONDS", const.DEFAULT_REWARDS_DURATION),
        reward_budget=_int_from_env("REWARD_BUDGET", const.DEFAULT_REWARD_BUDGET),
        initial_reward=_int_from_env("INITIAL_REWARD", const.DEFAULT_INITIAL_REWARD),
    )


def resolve_state_path(network: str) -> Path:
    """Return the JSON state file for a named local network."""
    sanitized = network.replace("/", "_")
    return STATE_DIR / f"{sanitized}.json"
