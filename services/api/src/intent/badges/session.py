"""Per-request wallet context handed to the badge engine."""

from __future__ import annotations

import uuid
from dataclasses import dataclass


class InvalidSessionError(ValueError):
    """Raised when a request does not identify a user and wallet."""


@dataclass(frozen=True)
class WalletSession:
    """The connected user and wallet an event is attributed to."""

    user_id: uuid.UUID
    wallet_address: str

    @classmethod
    def from_request(cls, user_id: str | None, wallet_address: str | None) -> WalletSession:
        """Build a session from raw request fields, rejecting missing or malformed ones."""
        wallet_address = (wallet_address or "").strip()
        if not user_id or not wallet_address:
            raise InvalidSessionError("Missing userId or walletAddress")
        try:
            parsed = uuid.UUID(str(user_id))
        except ValueError:
            raise InvalidSessionError("userId must be a UUID") from None
        return cls(user_id=parsed, wallet_address=wallet_address)
