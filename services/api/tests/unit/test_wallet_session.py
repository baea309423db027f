"""Wallet session validation tests."""

from __future__ import annotations

import dataclasses
import uuid

import pytest

from intent.badges.session import InvalidSessionError, WalletSession

WALLET = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"


class TestWalletSession:
    def test_valid_request(self):
        user_id = uuid.uuid4()
        session = WalletSession.from_request(str(user_id), WALLET)
        assert session.user_id == user_id
        assert session.wallet_address == WALLET

    def test_wallet_address_is_stripped(self):
        session = WalletSession.from_request(str(uuid.uuid4()), f"  {WALLET}\n")
        assert session.wallet_address == WALLET

    @pytest.mark.parametrize(
        ("user_id", "wallet"),
        [(None, WALLET), ("", WALLET), (str(uuid.uuid4()), None), (str(uuid.uuid4()), ""), (str(uuid.uuid4()), "  ")],
    )
    def test_missing_fields(self, user_id, wallet):
        with pytest.raises(InvalidSessionError, match="Missing userId or walletAddress"):
            WalletSession.from_request(user_id, wallet)

    def test_malformed_user_id(self):
        with pytest.raises(InvalidSessionError, match="userId must be a UUID"):
            WalletSession.from_request("user-42", WALLET)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            WalletSession.from_request(None, None)

    def test_immutable(self):
        session = WalletSession.from_request(str(uuid.uuid4()), WALLET)
        with pytest.raises(dataclasses.FrozenInstanceError):
            session.wallet_address = "0xother"  # type: ignore[misc]
