"""Deploy a staking system onto a local network and record where it lives."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from . import config as cfg
from . import pool_constants as const
from .config import PoolParameters
from .network import LocalNetwork
from .pool import StakingPool

LOGGER = logging.getLogger(__name__)

STAKING_TOKEN_KEY = "StakingToken"
REWARD_TOKEN_KEY = "RewardToken"
STAKING_POOL_KEY = "StakingPool"


@dataclass(frozen=True)
class DeploymentRecord:
    network: str
    deployer: str
    timestamp: datetime
    contracts: dict[str, str] = field(default_factory=dict)
    parameters: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "network": self.network,
            "deployer": self.deployer,
            "timestamp": self.timestamp.isoformat(),
            "contracts": dict(self.contracts),
            "parameters": dict(self.parameters),
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "DeploymentRecord":
        timestamp = datetime.fromisoformat(payload["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return cls(
            network=payload["network"],
            deployer=payload["deployer"],
            timestamp=timestamp,
            contracts={k: str(v) for k, v in payload.get("contracts", {}).items()},
            parameters={k: str(v) for k, v in payload.get("parameters", {}).items()},
        )


@dataclass(frozen=True)
class StakingDeployment:
    network: LocalNetwork
    pool: StakingPool
    record: DeploymentRecord


def deploy_staking_system(
    network: LocalNetwork,
    deployer: str,
    *,
    parameters: PoolParameters | None = None,
    stake_supply: int = const.DEFAULT_STAKE_TOKEN_SUPPLY,
    reward_supply: int = const.DEFAULT_REWARD_TOKEN_SUPPLY,
) -> StakingDeployment:
    """Deploy both tokens and the pool, fund it and open the first period."""
    params = parameters or cfg.default_pool_parameters()

    LOGGER.info("Deploying contracts with account %s on %s", deployer, network.name)
    stake_token = network.deploy_token(
        "Staking Token", "STK", deployer=deployer, supply=stake_supply
    )
    reward_token = network.deploy_token(
        "Reward Token", "RWD", deployer=deployer, supply=reward_supply
    )
    pool = network.deploy_pool(
        stake_token,
        reward_token,
        params.reward_rate,
        deployer=deployer,
        rewards_duration=params.rewards_duration,
    )

    reward_token.transfer(deployer, pool.address, params.reward_budget)
    LOGGER.info("Transferred %s reward units to %s", params.reward_budget, pool.address)
    pool.notify_reward_amount(deployer, params.initial_reward)
    LOGGER.info("Reward distribution initialized with %s", params.initial_reward)

    record = DeploymentRecord(
        network=network.name,
        deployer=deployer,
        timestamp=datetime.now(UTC),
        contracts={
            STAKING_TOKEN_KEY: stake_token.address,
            REWARD_TOKEN_KEY: reward_token.address,
            STAKING_POOL_KEY: pool.address,
        },
        parameters={
            "rewardRate": str(params.reward_rate),
            "rewardsDuration": str(params.rewards_duration),
            "rewardBudget": str(params.reward_budget),
            "initialReward": str(params.initial_reward),
        },
    )
    return StakingDeployment(network=network, pool=pool, record=record)


def save_deployment(record: DeploymentRecord, directory: Path | None = None) -> Path:
    """Write ``record`` to ``<network>-<epoch ms>.json`` under the deployments dir."""
    target_dir = directory or cfg.DEPLOYMENTS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    stamp = int(record.timestamp.timestamp() * 1000)
    path = target_dir / f"{record.network}-{stamp}.json"
    path.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
    return path


def latest_deployment(network: str, directory: Path | None = None) -> DeploymentRecord | None:
    target_dir = directory or cfg.DEPLOYMENTS_DIR
    if not target_dir.exists():
        return None
    candidates = sorted(
        (p for p in target_dir.glob(f"{network}-*.json") if p.stem[len(network) + 1 :].isdigit()),
        key=lambda p: int(p.stem[len(network) + 1 :]),
        reverse=True,
    )
    if not candidates:
        return None
    payload = json.loads(candidates[0].read_text(encoding="utf-8"))
    return DeploymentRecord.from_dict(payload)
