"""In-process chain hosting tokens and pools, persisted as JSON.

A ``LocalNetwork`` owns the clock shared by everything deployed on it, hands
out deterministic addresses and keeps a registry of deployed contracts. The
whole network can be written to disk and loaded back so that separate
script invocations operate on the same ledger.
"""

from __future__ import annotations

import json
import logging
from hashlib import sha3_256
from pathlib import Path
from typing import Any

from . import pool_constants as const
from .assets import SimpleToken
from .clock import Clock, ManualClock, SystemClock
from .pool import StakingPool

LOGGER = logging.getLogger(__name__)

STATE_VERSION = 1


def derive_address(*parts: Any) -> str:
    digest = sha3_256()
    for part in parts:
        digest.update(str(part).encode())
        digest.update(b"\x00")
    return "0x" + digest.digest()[-20:].hex()


class LocalNetwork:
    def __init__(self, name: str, clock: Clock | None = None):
        self.name = name
        self.clock = clock if clock is not None else ManualClock()
        self.contracts: dict[str, SimpleToken | StakingPool] = {}
        self.nonce = 0

    def __repr__(self) -> str:
        return f"LocalNetwork({self.name}, contracts={len(self.contracts)})"

    def account(self, label: str) -> str:
        """Deterministic externally-owned address for a human label."""
        return derive_address(self.name, "account", label)

    def _next_contract_address(self, deployer: str) -> str:
        address = derive_address(self.name, deployer, self.nonce)
        self.nonce += 1
        return address

    def deploy_token(
        self,
        name: str,
        symbol: str,
        *,
        deployer: str,
        supply: int,
        decimals: int = const.TOKEN_DECIMALS,
    ) -> SimpleToken:
        token = SimpleToken(
            name,
            symbol,
            address=self._next_contract_address(deployer),
            deployer=deployer,
            supply=supply,
            decimals=decimals,
        )
        self.contracts[token.address] = token
        LOGGER.info("Deployed %s (%s) at %s", name, symbol, token.address)
        return token

    def deploy_pool(
        self,
        stake_token: SimpleToken,
        reward_token: SimpleToken,
        initial_reward_rate: int,
        *,
        deployer: str,
        rewards_duration: int = const.DEFAULT_REWARDS_DURATION,
    ) -> StakingPool:
        pool = StakingPool(
            stake_token,
            reward_token,
            initial_reward_rate,
            owner=deployer,
            clock=self.clock,
            address=self._next_contract_address(deployer),
            rewards_duration=rewards_duration,
        )
        self.contracts[pool.address] = pool
        LOGGER.info("Deployed StakingPool at %s", pool.address)
        return pool

    def contract(self, address: str) -> SimpleToken | StakingPool:
        try:
            return self.contracts[address]
        except KeyError:
            raise KeyError(f"No contract at {address} on {self.name}") from None

    def token(self, address: str) -> SimpleToken:
        contract = self.contract(address)
        if not isinstance(contract, SimpleToken):
            raise TypeError(f"{address} is not a token")
        return contract

    def pool(self, address: str) -> StakingPool:
        contract = self.contract(address)
        if not isinstance(contract, StakingPool):
            raise TypeError(f"{address} is not a staking pool")
        return contract

    def advance_time(self, seconds: int) -> int:
        if not isinstance(self.clock, ManualClock):
            raise TypeError("Only a manual clock can be advanced")
        return self.clock.advance(seconds)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        manual = isinstance(self.clock, ManualClock)
        return {
            "version": STATE_VERSION,
            "name": self.name,
            "nonce": self.nonce,
            "clock": {"kind": "manual" if manual else "system", "now": self.clock.now()},
            "tokens": [c.to_dict() for c in self.contracts.values() if isinstance(c, SimpleToken)],
            "pools": [c.to_dict() for c in self.contracts.values() if isinstance(c, StakingPool)],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "LocalNetwork":
        version = int(payload.get("version", STATE_VERSION))
        if version != STATE_VERSION:
            raise ValueError(f"Unsupported network state version {version}")
        clock_payload = payload.get("clock", {})
        if clock_payload.get("kind", "manual") == "manual":
            clock: Clock = ManualClock(int(clock_payload.get("now", 0)))
        else:
            clock = SystemClock()
        network = cls(payload["name"], clock)
        network.nonce = int(payload.get("nonce", 0))
        for token_payload in payload.get("tokens", []):
            token = SimpleToken.from_dict(token_payload)
            network.contracts[token.address] = token
        tokens = dict(network.contracts)
        for pool_payload in payload.get("pools", []):
            pool = StakingPool.from_dict(pool_payload, assets=tokens, clock=clock)
            network.contracts[pool.address] = pool
        return network

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "LocalNetwork":
        payload = json.loads(path.read_text(encoding="utf-8"))
        return cls.from_dict(payload)
