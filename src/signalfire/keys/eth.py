"""
ECDSA / secp256k1 account helpers.

The decrypted key only lives inside :func:`unlocked_account`; callers
sign within the ``with`` block and let the account go afterwards.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import DecryptionFailedError
from .keystore import KeyStore, is_valid_private_key


@contextmanager
def unlocked_account(keystore: KeyStore) -> Iterator[LocalAccount]:
    """
    Decrypt the key and yield an eth-account ``LocalAccount``.

    Raises:
        KeyNotFoundError: If no key is stored
        DecryptionFailedError: If the key cannot be decrypted or is not a valid key
    """
    private_key = keystore.decrypt_key().strip()
    if not is_valid_private_key(private_key):
        raise DecryptionFailedError("Stored key is not a valid private key")

    try:
        account = Account.from_key("0x" + private_key.removeprefix("0x"))
    except ValueError as exc:
        # well-formed hex, but outside the secp256k1 scalar range
        raise DecryptionFailedError("Stored key is not a valid private key") from exc
    finally:
        del private_key
    try:
        yield account
    finally:
        del account


def get_address(keystore: KeyStore) -> str:
    """
    Get the Ethereum address of the stored key.

    Returns:
        0x-prefixed checksummed Ethereum address
    """
    with unlocked_account(keystore) as account:
        return account.address


def is_usable_private_key(value: str) -> bool:
    """64 hex characters that also form a valid secp256k1 private key."""
    if not is_valid_private_key(value):
        return False
    try:
        Account.from_key("0x" + value.removeprefix("0x"))
    except ValueError:
        return False
    return True
