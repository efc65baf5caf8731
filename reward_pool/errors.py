"""Exceptions raised by the reward pool.

Every failure aborts the operation that raised it with no partial state
change. The ``reason`` string is meant to be shown to the caller as-is.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all reward pool failures."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InputError(PoolError):
    """An argument is outside the accepted range (zero stake, negative amount)."""


class InsufficientFunds(PoolError):
    """A balance, stake or reward budget is too small for the request."""


class Unauthorized(PoolError):
    """A non-owner called an owner-only operation."""

    def __init__(self, account: str):
        super().__init__(f"OwnableUnauthorizedAccount({account})")
        self.account = account


class InvalidState(PoolError):
    """The operation is not allowed in the pool's current state."""


class EnforcedPause(InvalidState):
    def __init__(self):
        super().__init__("EnforcedPause")


class ExpectedPause(InvalidState):
    def __init__(self):
        super().__init__("ExpectedPause")


class ReentrancyError(InvalidState):
    def __init__(self):
        super().__init__("ReentrancyGuardReentrantCall")


class PoolArithmeticError(PoolError, ArithmeticError):
    """A stored value would leave the unsigned 256-bit domain."""


class TransferFailed(PoolError):
    """An asset reported a failed transfer."""
