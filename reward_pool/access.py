"""Owner identity and pause flag guarding admin and entry operations."""

from __future__ import annotations

from dataclasses import dataclass

from . import pool_constants as const
from .errors import EnforcedPause, ExpectedPause, InputError, Unauthorized


@dataclass
class AccessGuard:
    owner: str
    paused: bool = False

    def require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise Unauthorized(caller)

    def require_not_paused(self) -> None:
        if self.paused:
            raise EnforcedPause()

    def pause(self, caller: str) -> None:
        self.require_owner(caller)
        self.require_not_paused()
        self.paused = True

    def unpause(self, caller: str) -> None:
        self.require_owner(caller)
        if not self.paused:
            raise ExpectedPause()
        self.paused = False

    def transfer_ownership(self, caller: str, new_owner: str) -> str:
        """Hand the owner role to ``new_owner`` and return the previous owner."""
        self.require_owner(caller)
        if not new_owner or new_owner == const.ZERO_ADDRESS:
            raise InputError(f"OwnableInvalidOwner({new_owner})")
        previous, self.owner = self.owner, new_owner
        return previous
