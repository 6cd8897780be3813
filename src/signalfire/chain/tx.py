"""
Transaction Builder - Build, sign, and send the fire() transaction.

Uses eth-account for signing and the httpx-based JSON-RPC client for
sending. All gas is paid by the operator's EOA.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_account.signers.local import LocalAccount

from .calldata import to_checksum_address
from .fees import DynamicFees, FeeFields
from .rpc import RpcClient, send_raw_transaction


@dataclass(frozen=True)
class TransactionRequest:
    """
    An unsigned contract call.

    Attributes:
        to: Contract address
        data: 0x-prefixed calldata
        gas_limit: Gas limit
        nonce: Sender nonce
        fees: Legacy or EIP-1559 fee fields
        chain_id: EIP-155 chain ID
        value: Wei sent along with the call
    """
    to: str
    data: str
    gas_limit: int
    nonce: int
    fees: FeeFields
    chain_id: int
    value: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Transaction dict in the shape eth-account expects."""
        tx: dict[str, Any] = {
            "to": to_checksum_address(self.to),
            "data": self.data,
            "value": self.value,
            "nonce": self.nonce,
            "gas": self.gas_limit,
            "chainId": self.chain_id,
        }
        tx.update(self.fees.to_dict())
        if isinstance(self.fees, DynamicFees):
            tx["type"] = 2
            tx["accessList"] = []
        return tx


def sign_transaction(account: LocalAccount, request: TransactionRequest) -> str:
    """
    Sign a transaction request.

    Returns:
        0x-prefixed hex encoded signed transaction
    """
    signed = account.sign_transaction(request.to_dict())
    return "0x" + bytes(signed.raw_transaction).hex()


def submit_transaction(client: RpcClient, url: str, raw_tx: str) -> str:
    """Broadcast a signed transaction and return its hash."""
    return send_raw_transaction(client, url, raw_tx)
