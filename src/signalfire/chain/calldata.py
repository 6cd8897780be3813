"""
Calldata helpers - selectors, checksummed addresses and revert reasons.

The fire() call takes no arguments, so its calldata is just the 4-byte
selector. Revert payloads follow the Solidity ``Error(string)`` ABI and
are decoded with eth-abi.
"""

from __future__ import annotations

from typing import Any, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_hash.auto import keccak

# fire() on the target contract
FIRE_SELECTOR = "0x457094cc"

# keccak256("Error(string)")[:4]
ERROR_STRING_SELECTOR = "08c379a0"


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    eth-account requires checksummed addresses in transaction fields.
    """
    addr = address.lower().removeprefix("0x")
    if len(addr) != 40 or any(c not in "0123456789abcdef" for c in addr):
        raise ValueError(f"Invalid address: {address}")
    addr_hash = keccak(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def decode_revert_reason(data: Any) -> Optional[str]:
    """
    Decode an ``Error(string)`` revert payload.

    Nodes put the raw return data of a reverted call in the ``data``
    field of the JSON-RPC error, either as a hex string or nested in a
    dict under ``data``.

    Returns:
        The revert reason, or None if the payload is absent or not an
        ``Error(string)``.
    """
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, str):
        return None

    raw = data.removeprefix("0x")
    if not raw.startswith(ERROR_STRING_SELECTOR):
        return None

    try:
        (reason,) = decode(["string"], bytes.fromhex(raw[len(ERROR_STRING_SELECTOR):]))
    except (ValueError, DecodingError):
        return None
    return reason
