"""
Confirmation polling.

Polls ``eth_getTransactionReceipt`` until the transaction is mined or a
wall-clock timeout (measured from the first poll) elapses. A failed read
counts as "not mined yet" for that tick. A timeout is inconclusive: the
transaction may still be mined later.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..errors import DecodeError, RpcError
from .endpoints import Endpoint
from .rpc import RpcClient, get_transaction_receipt, parse_quantity

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_PROGRESS_INTERVAL = 15.0


class ReceiptStatus(Enum):
    SUCCESS = 1
    REVERTED = 0


class ConfirmationState(str, Enum):
    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    block_number: int
    status: ReceiptStatus
    gas_used: int

    @classmethod
    def from_rpc(cls, tx_hash: str, payload: dict) -> "TransactionReceipt":
        """
        Decode a receipt object returned by a node.

        Raises:
            DecodeError: If blockNumber, status or gasUsed is missing or malformed
        """
        status = parse_quantity(payload.get("status"), "receipt status")
        if status not in (0, 1):
            raise DecodeError(f"Unexpected receipt status: {status}")
        return cls(
            tx_hash=tx_hash,
            block_number=parse_quantity(payload.get("blockNumber"), "block number"),
            status=ReceiptStatus(status),
            gas_used=parse_quantity(payload.get("gasUsed"), "gas used"),
        )


@dataclass(frozen=True)
class Confirmation:
    state: ConfirmationState
    receipt: Optional[TransactionReceipt] = None
    elapsed: float = 0.0

    @property
    def timed_out(self) -> bool:
        return self.state is ConfirmationState.TIMED_OUT


class ConfirmationPoller:
    """
    Wait for a transaction receipt.

    Args:
        client: RPC client
        poll_interval: Seconds between receipt queries
        progress_interval: Minimum seconds between "still waiting" log lines
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)
    """

    def __init__(
        self,
        client: RpcClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.progress_interval = progress_interval
        self._sleep = sleep
        self._clock = clock

    def await_confirmation(
        self,
        tx_hash: str,
        endpoint: Endpoint,
        timeout: float,
        label: Optional[str] = None,
    ) -> Confirmation:
        """Poll ``endpoint`` until the receipt is found or ``timeout`` seconds pass.

        ``label`` prefixes warnings about failed reads and defaults to the
        endpoint name.
        """
        label = label or endpoint.name
        logger.info("Waiting for transaction %s to be mined...", tx_hash)

        start = self._clock()
        last_report = start

        while True:
            receipt = self._fetch(tx_hash, endpoint, label)
            now = self._clock()
            elapsed = now - start

            if receipt is not None:
                return self._settle(receipt, elapsed)

            if elapsed >= timeout:
                logger.warning(
                    "Transaction confirmation timed out after %d seconds", int(timeout)
                )
                return Confirmation(ConfirmationState.TIMED_OUT, elapsed=elapsed)

            if now - last_report >= self.progress_interval:
                logger.info("Still waiting for confirmation... (%ds elapsed)", int(elapsed))
                last_report = now

            self._sleep(min(self.poll_interval, timeout - elapsed))

    def _fetch(
        self, tx_hash: str, endpoint: Endpoint, label: str
    ) -> Optional[TransactionReceipt]:
        try:
            payload = get_transaction_receipt(self.client, endpoint.url, tx_hash)
            if payload is None:
                return None
            return TransactionReceipt.from_rpc(tx_hash, payload)
        except RpcError as exc:
            if "unknown block" in str(exc).lower():
                logger.warning(
                    "%s: receipt not available yet (Unknown block). The network may be catching up.",
                    label,
                )
            else:
                logger.warning("%s: failed to check receipt: %s", label, exc)
        except DecodeError as exc:
            logger.warning("%s: could not decode receipt: %s", label, exc)
        return None

    def _settle(self, receipt: TransactionReceipt, elapsed: float) -> Confirmation:
        if receipt.status is ReceiptStatus.SUCCESS:
            logger.info(
                "Transaction confirmed in block %d! Gas used: %d",
                receipt.block_number, receipt.gas_used,
            )
            return Confirmation(ConfirmationState.CONFIRMED, receipt, elapsed)

        logger.warning(
            "Transaction was mined in block %d but failed with status: %d",
            receipt.block_number, receipt.status.value,
        )
        return Confirmation(ConfirmationState.REVERTED, receipt, elapsed)
