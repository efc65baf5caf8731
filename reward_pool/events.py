"""Events published by a reward pool after an operation commits."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import ClassVar


@dataclass(frozen=True)
class PoolEvent:
    name: ClassVar[str] = "PoolEvent"

    def to_dict(self) -> dict:
        return {"event": self.name, **asdict(self)}

    def to_json(self) -> str:
        # amounts can exceed 2**53, keep them exact for JSON consumers
        payload = {
            key: str(value) if isinstance(value, int) else value
            for key, value in self.to_dict().items()
        }
        return json.dumps(payload, separators=(",", ":"))


@dataclass(frozen=True)
class Staked(PoolEvent):
    name: ClassVar[str] = "Staked"
    account: str
    amount: int


@dataclass(frozen=True)
class Withdrawn(PoolEvent):
    name: ClassVar[str] = "Withdrawn"
    account: str
    amount: int


@dataclass(frozen=True)
class RewardPaid(PoolEvent):
    name: ClassVar[str] = "RewardPaid"
    account: str
    amount: int


@dataclass(frozen=True)
class RewardAdded(PoolEvent):
    name: ClassVar[str] = "RewardAdded"
    amount: int


@dataclass(frozen=True)
class RewardsDurationUpdated(PoolEvent):
    name: ClassVar[str] = "RewardsDurationUpdated"
    new_duration: int


@dataclass(frozen=True)
class Paused(PoolEvent):
    name: ClassVar[str] = "Paused"
    account: str


@dataclass(frozen=True)
class Unpaused(PoolEvent):
    name: ClassVar[str] = "Unpaused"
    account: str


@dataclass(frozen=True)
class OwnershipTransferred(PoolEvent):
    name: ClassVar[str] = "OwnershipTransferred"
    previous_owner: str
    new_owner: str
