"""
JSON-RPC Client for EVM endpoints.

Lightweight alternative to web3.py: uses httpx for HTTP. Each call is a
single POST with a bounded timeout; there is no retry here. Failover
between endpoints is the submission engine's job.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional

import httpx

from ..errors import DecodeError, RevertError, RpcError, TransportError
from .calldata import decode_revert_reason

DEFAULT_RPC_TIMEOUT = 10.0

_REVERT_MARKER = "execution reverted"

_request_ids = itertools.count(1)


class RpcClient:
    """
    Stateless JSON-RPC 2.0 client.

    Args:
        timeout: Per-call timeout in seconds
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    def call(self, url: str, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            url: RPC endpoint URL
            method: RPC method name (e.g., "eth_blockNumber")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            TransportError: If the HTTP exchange fails or the body is not JSON
            RevertError: If the node reports that execution reverted
            RpcError: If the response carries any other JSON-RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(_request_ids),
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{method} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"{method} returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise TransportError(f"{method} returned an unexpected payload: {data!r}")

        if data.get("error") is not None:
            raise _error_from_payload(data["error"])

        return data.get("result")


def _error_from_payload(error: Any) -> RpcError:
    if not isinstance(error, dict):
        return RpcError(f"RPC error: {error}")

    message = str(error.get("message", error))
    code = error.get("code")
    data = error.get("data")

    if _REVERT_MARKER in message.lower():
        return RevertError(message, code=code, data=data, reason=decode_revert_reason(data))
    return RpcError(message, code=code, data=data)


def parse_quantity(value: Any, field: str = "value") -> int:
    """
    Decode a JSON-RPC hex quantity (e.g. ``"0x1a"``) into an int.

    Raises:
        DecodeError: If the value is not a 0x-prefixed hex string
    """
    if not isinstance(value, str) or not value.startswith("0x"):
        raise DecodeError(f"Malformed {field}: {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise DecodeError(f"Malformed {field}: {value!r}") from exc


def get_block_number(client: RpcClient, url: str) -> int:
    """Get the latest block number (cheap liveness check)."""
    result = client.call(url, "eth_blockNumber", [])
    return parse_quantity(result, "block number")


def get_nonce(client: RpcClient, url: str, address: str) -> int:
    """
    Get transaction nonce for an address.

    Args:
        client: RPC client
        url: RPC endpoint URL
        address: 0x-prefixed address

    Returns:
        Current nonce
    """
    result = client.call(url, "eth_getTransactionCount", [address, "latest"])
    return parse_quantity(result, "nonce")


def estimate_gas(client: RpcClient, url: str, tx: dict) -> int:
    """Ask the node for a gas estimate for a call object."""
    result = client.call(url, "eth_estimateGas", [tx])
    return parse_quantity(result, "gas estimate")


def send_raw_transaction(client: RpcClient, url: str, raw_tx: str) -> str:
    """
    Send a signed raw transaction.

    Args:
        raw_tx: 0x-prefixed hex encoded signed transaction

    Returns:
        Transaction hash (0x-prefixed hex)
    """
    result = client.call(url, "eth_sendRawTransaction", [raw_tx])
    if not isinstance(result, str) or not result.startswith("0x"):
        raise DecodeError(f"Malformed transaction hash: {result!r}")
    return result


def get_transaction_receipt(client: RpcClient, url: str, tx_hash: str) -> Optional[dict]:
    """Fetch a receipt; None while the transaction is not yet mined."""
    result = client.call(url, "eth_getTransactionReceipt", [tx_hash])
    if result is None:
        return None
    if not isinstance(result, dict):
        raise DecodeError(f"Malformed receipt: {result!r}")
    return result
