"""Fungible assets held and moved by the reward pool.

The pool treats both of its assets as opaque collaborators: it only relies on
``balance_of``, ``transfer`` and ``transfer_from``. Any of these calls may fail
or call back into the pool before returning.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from . import pool_constants as const
from .errors import InputError, InsufficientFunds, PoolArithmeticError, TransferFailed

LOGGER = logging.getLogger(__name__)


class Asset(Protocol):
    address: str

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool: ...


def safe_transfer(asset: Asset, sender: str, recipient: str, amount: int) -> None:
    if not asset.transfer(sender, recipient, amount):
        raise TransferFailed(f"Transfer of {amount} from {sender} to {recipient} failed")


def safe_transfer_from(
    asset: Asset, spender: str, owner: str, recipient: str, amount: int
) -> None:
    if not asset.transfer_from(spender, owner, recipient, amount):
        raise TransferFailed(f"TransferFrom of {amount} from {owner} to {recipient} failed")


class SimpleToken:
    """In-memory fixed-supply fungible token with allowances.

    The whole supply is minted to ``deployer`` at construction. Failed
    transfers raise before touching any balance.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        *,
        address: str,
        deployer: str,
        supply: int,
        decimals: int = const.TOKEN_DECIMALS,
    ):
        if supply < 0 or supply > const.UINT256_MAX:
            raise InputError(f"Invalid supply {supply}")
        self.name = name
        self.symbol = symbol
        self.address = address
        self.decimals = decimals
        self.total_supply = supply
        self.balances: dict[str, int] = {deployer: supply} if supply else {}
        self.allowances: dict[str, dict[str, int]] = {}

    def __repr__(self) -> str:
        return f"SimpleToken({self.symbol}, {self.address})"

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(owner, {}).get(spender, 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        check_amount(amount)
        self.allowances.setdefault(owner, {})[spender] = amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        check_amount(amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientFunds(
                f"ERC20InsufficientAllowance({spender}, {allowed}, {amount})"
            )
        self._move(owner, recipient, amount)
        if allowed != const.UINT256_MAX:
            self.allowances[owner][spender] = allowed - amount
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        check_amount(amount)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientFunds(f"ERC20InsufficientBalance({sender}, {balance}, {amount})")
        self.balances[sender] = balance - amount
        self.balances[recipient] = self.balance_of(recipient) + amount
        LOGGER.debug("%s transfer %s -> %s: %s", self.symbol, sender, recipient, amount)

    def snapshot(self) -> Any:
        return (
            dict(self.balances),
            {owner: dict(spenders) for owner, spenders in self.allowances.items()},
        )

    def restore(self, snapshot: Any) -> None:
        balances, allowances = snapshot
        self.balances = dict(balances)
        self.allowances = {owner: dict(spenders) for owner, spenders in allowances.items()}

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "decimals": self.decimals,
            "total_supply": self.total_supply,
            "balances": dict(self.balances),
            "allowances": {owner: dict(spenders) for owner, spenders in self.allowances.items()},
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "SimpleToken":
        token = cls(
            payload["name"],
            payload["symbol"],
            address=payload["address"],
            deployer=payload["address"],
            supply=0,
            decimals=int(payload.get("decimals", const.TOKEN_DECIMALS)),
        )
        token.total_supply = int(payload["total_supply"])
        token.balances = {k: int(v) for k, v in payload["balances"].items()}
        token.allowances = {
            owner: {spender: int(v) for spender, v in spenders.items()}
            for owner, spenders in payload.get("allowances", {}).items()
        }
        return token


def check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InputError(f"Amount must be an integer, got {amount!r}")
    if amount < 0:
        raise InputError(f"Negative amount {amount}")
    if amount > const.UINT256_MAX:
        raise PoolArithmeticError(f"Amount {amount} exceeds uint256")
