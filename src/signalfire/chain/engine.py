"""
Submission engine - send fire() through the first endpoint that takes it.

Flow:
1. Probe every configured endpoint once (advisory; empty result means
   "try them all")
2. For each retry round, walk the candidate endpoints in configured order
   and run one attempt per endpoint:
   liveness -> unlock key -> nonce -> gas -> fees -> sign -> broadcast
3. The first broadcast that succeeds is polled for a receipt and its
   hash returned, whatever the confirmation outcome
4. Between rounds wait ``retry_delay``; after the last round give up

Each attempt returns an :class:`Attempt` instead of raising. Only key
store errors escape an attempt, because no other endpoint can fix them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..config import Settings
from ..errors import DecodeError, RevertError, RpcError, SubmissionExhaustedError
from ..keys.eth import unlocked_account
from ..keys.keystore import KeyStore
from .calldata import FIRE_SELECTOR
from .endpoints import Endpoint
from .fees import describe_fees, select_fees
from .gas import estimate_gas_limit
from .health import candidate_endpoints, probe
from .receipts import Confirmation, ConfirmationPoller, ConfirmationState
from .rpc import RpcClient, get_block_number, get_nonce
from .tx import TransactionRequest, sign_transaction, submit_transaction

logger = logging.getLogger(__name__)

DRY_RUN_TX_HASH = "test-transaction-hash"


class AttemptOutcome(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Attempt:
    endpoint: Endpoint
    round_number: int
    outcome: AttemptOutcome
    detail: str  # tx hash when SENT, reason otherwise

    @property
    def sent(self) -> bool:
        return self.outcome is AttemptOutcome.SENT


@dataclass(frozen=True)
class FireOutcome:
    tx_hash: str
    endpoint: Endpoint
    round_number: int
    confirmation: Optional[Confirmation] = None
    dry_run: bool = False


class FireEngine:
    """
    Orchestrates one fire() submission.

    Args:
        settings: Process configuration
        keystore: Source of the signing key
        client: RPC client (default: one using ``settings.rpc_timeout``)
        poller: Confirmation poller (default: built from settings)
        sleep: Sleep used between retry rounds
    """

    def __init__(
        self,
        settings: Settings,
        keystore: KeyStore,
        client: Optional[RpcClient] = None,
        poller: Optional[ConfirmationPoller] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.keystore = keystore
        self.client = client or RpcClient(timeout=settings.rpc_timeout)
        self.poller = poller or ConfirmationPoller(
            self.client,
            poll_interval=settings.poll_interval,
            progress_interval=settings.progress_interval,
            sleep=sleep,
        )
        self._sleep = sleep

    def run(self) -> FireOutcome:
        """
        Send the transaction and wait for it to be mined.

        Returns:
            The outcome, including the confirmation result (None in dry-run)

        Raises:
            KeyStoreError: If the signing key cannot be loaded
            SubmissionExhaustedError: If no endpoint accepted the transaction
        """
        endpoints = list(self.settings.endpoints)
        candidates = candidate_endpoints(endpoints, probe(self.client, endpoints))
        max_retries = self.settings.max_retries
        attempts = 0

        for round_number in range(1, max_retries + 1):
            for endpoint in candidates:
                attempt = self._attempt(endpoint, round_number)
                attempts += 1
                if attempt.sent:
                    return self._finish(attempt)

            if round_number < max_retries:
                logger.warning(
                    "All RPC endpoints failed. Retry attempt %d of %d", round_number, max_retries
                )
                logger.info("Waiting %g seconds before retry...", self.settings.retry_delay)
                self._sleep(self.settings.retry_delay)

        logger.error("All RPC endpoints failed after maximum retry attempts")
        raise SubmissionExhaustedError(rounds=max_retries, attempts=attempts)

    def _tag(self, endpoint: Endpoint, round_number: int) -> str:
        return f"[round {round_number}/{self.settings.max_retries}] {endpoint.name}"

    def _attempt(self, endpoint: Endpoint, round_number: int) -> Attempt:
        settings = self.settings
        tag = self._tag(endpoint, round_number)
        logger.info("Transaction attempt %d using %s", round_number, endpoint.name)

        def skipped(operation: str, exc: Exception) -> Attempt:
            logger.warning("%s: %s failed: %s", tag, operation, exc)
            return Attempt(endpoint, round_number, AttemptOutcome.SKIPPED, f"{operation}: {exc}")

        try:
            get_block_number(self.client, endpoint.url)
        except (RpcError, DecodeError) as exc:
            return skipped("connection test", exc)

        with unlocked_account(self.keystore) as account:
            logger.info("Using wallet: %s", account.address)

            try:
                nonce = get_nonce(self.client, endpoint.url, account.address)
            except (RpcError, DecodeError) as exc:
                return skipped("nonce lookup", exc)
            logger.info("Current nonce: %d", nonce)

            gas_limit = estimate_gas_limit(
                self.client, endpoint, account.address, settings.contract_address, FIRE_SELECTOR,
                label=tag,
            )
            fees = select_fees(endpoint, settings.fees)
            request = TransactionRequest(
                to=settings.contract_address,
                data=FIRE_SELECTOR,
                gas_limit=gas_limit,
                nonce=nonce,
                fees=fees,
                chain_id=settings.chain_id,
            )

            if settings.dry_run:
                logger.info("TEST MODE: Transaction not sent")
                return Attempt(endpoint, round_number, AttemptOutcome.SENT, DRY_RUN_TX_HASH)

            logger.info("Preparing to call fire() on contract: %s", settings.contract_address)
            logger.info("Using %s", describe_fees(fees))
            raw_tx = sign_transaction(account, request)

        logger.info("Sending transaction...")
        try:
            tx_hash = submit_transaction(self.client, endpoint.url, raw_tx)
        except RevertError as exc:
            logger.warning("%s: contract execution reverted: %s", tag, exc.reason or exc)
            logger.warning(
                "The contract may have time restrictions or other conditions for the fire() function."
            )
            return Attempt(endpoint, round_number, AttemptOutcome.FAILED, f"reverted: {exc}")
        except (RpcError, DecodeError) as exc:
            logger.warning("%s: failed to send transaction: %s", tag, exc)
            return Attempt(endpoint, round_number, AttemptOutcome.FAILED, str(exc))

        logger.info("Transaction sent with hash: %s", tx_hash)
        return Attempt(endpoint, round_number, AttemptOutcome.SENT, tx_hash)

    def _finish(self, attempt: Attempt) -> FireOutcome:
        if self.settings.dry_run:
            return FireOutcome(attempt.detail, attempt.endpoint, attempt.round_number, dry_run=True)

        confirmation = self.poller.await_confirmation(
            attempt.detail,
            attempt.endpoint,
            self.settings.confirmation_timeout,
            label=self._tag(attempt.endpoint, attempt.round_number),
        )
        if confirmation.state is ConfirmationState.TIMED_OUT:
            logger.warning("Transaction submitted but confirmation timed out")
            logger.warning("The transaction may still be successful, check explorer later")
        elif confirmation.state is ConfirmationState.REVERTED:
            logger.warning("Transaction %s was mined but reverted", attempt.detail)

        return FireOutcome(attempt.detail, attempt.endpoint, attempt.round_number, confirmation)


def send_fire_transaction(settings: Settings, keystore: KeyStore, **kwargs) -> str:
    """
    Send fire() and return the transaction hash.

    Convenience wrapper around :meth:`FireEngine.run`; keyword arguments
    are passed to :class:`FireEngine`.
    """
    return FireEngine(settings, keystore, **kwargs).run().tx_hash
