"""Per-account stake and reward bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import pool_constants as const
from .assets import check_amount
from .errors import InsufficientFunds, PoolArithmeticError


@dataclass
class Account:
    staked_balance: int = 0
    rewards: int = 0
    reward_per_token_paid: int = 0

    @property
    def is_empty(self) -> bool:
        return self.staked_balance == 0 and self.rewards == 0


@dataclass
class UserLedger:
    """Stake balances keyed by address.

    ``total_staked`` always equals the sum of every account's
    ``staked_balance``. Accounts are opened on first stake and are kept once
    emptied.
    """

    accounts: dict[str, Account] = field(default_factory=dict)
    total_staked: int = 0

    def get(self, address: str) -> Account:
        """Stored account, or a detached empty one for unknown addresses."""
        account = self.accounts.get(address)
        if account is None:
            return Account()
        return account

    def open(self, address: str) -> Account:
        account = self.accounts.get(address)
        if account is None:
            account = self.accounts[address] = Account()
        return account

    def credit(self, address: str, amount: int) -> Account:
        check_amount(amount)
        if self.total_staked + amount > const.UINT256_MAX:
            raise PoolArithmeticError("Total stake exceeds uint256")
        account = self.open(address)
        account.staked_balance += amount
        self.total_staked += amount
        return account

    def debit(self, address: str, amount: int) -> Account:
        check_amount(amount)
        account = self.get(address)
        if amount > account.staked_balance:
            raise InsufficientFunds("Insufficient balance")
        if amount == 0:
            return account
        account.staked_balance -= amount
        self.total_staked -= amount
        return account

    def to_dict(self) -> dict:
        return {
            "total_staked": self.total_staked,
            "accounts": {
                address: {
                    "staked_balance": acct.staked_balance,
                    "rewards": acct.rewards,
                    "reward_per_token_paid": acct.reward_per_token_paid,
                }
                for address, acct in self.accounts.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "UserLedger":
        accounts = {
            address: Account(
                staked_balance=int(values["staked_balance"]),
                rewards=int(values["rewards"]),
                reward_per_token_paid=int(values["reward_per_token_paid"]),
            )
            for address, values in payload.get("accounts", {}).items()
        }
        return cls(accounts=accounts, total_staked=int(payload.get("total_staked", 0)))
