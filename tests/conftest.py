from __future__ import annotations

from dataclasses import dataclass

import pytest

from reward_pool import pool_constants as const
from reward_pool.assets import SimpleToken
from reward_pool.clock import ManualClock
from reward_pool.network import LocalNetwork
from reward_pool.pool import StakingPool

UNIT = const.UNIT
START_TIME = 1_700_000_000


@dataclass
class PoolFixture:
    network: LocalNetwork
    clock: ManualClock
    pool: StakingPool
    stake_token: SimpleToken
    reward_token: SimpleToken
    owner: str
    user1: str
    user2: str
    reward_rate: int
    reward_amount: int

    def approve_and_stake(self, account: str, amount: int) -> None:
        self.stake_token.approve(account, self.pool.address, amount)
        self.pool.stake(account, amount)


@pytest.fixture()
def deployed() -> PoolFixture:
    clock = ManualClock(START_TIME)
    network = LocalNetwork("testnet", clock)
    owner = network.account("owner")
    user1 = network.account("user1")
    user2 = network.account("user2")

    stake_token = network.deploy_token(
        "Staking Token", "STK", deployer=owner, supply=const.DEFAULT_STAKE_TOKEN_SUPPLY
    )
    reward_token = network.deploy_token(
        "Reward Token", "RWD", deployer=owner, supply=const.DEFAULT_REWARD_TOKEN_SUPPLY
    )
    reward_rate = 100 * UNIT
    pool = network.deploy_pool(stake_token, reward_token, reward_rate, deployer=owner)

    stake_token.transfer(owner, user1, 1_000 * UNIT)
    stake_token.transfer(owner, user2, 1_000 * UNIT)

    reward_amount = 100_000 * UNIT
    reward_token.transfer(owner, pool.address, reward_amount)

    return PoolFixture(
        network=network,
        clock=clock,
        pool=pool,
        stake_token=stake_token,
        reward_token=reward_token,
        owner=owner,
        user1=user1,
        user2=user2,
        reward_rate=reward_rate,
        reward_amount=reward_amount,
    )
