"""Shared fakes: an in-memory RPC client, a static key store and test settings."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import replace
from typing import Any

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from signalfire.config import Settings, build_endpoints
from signalfire.errors import KeyNotFoundError

DRPC_URL = "https://drpc.test/rpc"
RONIN_URL = "https://ronin.test/rpc"

# Well-known throwaway key; never holds funds.
TEST_PRIVATE_KEY = "0x" + "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

DEFAULT_RESPONSES: dict[str, Any] = {
    "eth_blockNumber": "0x10",
    "eth_getTransactionCount": "0x5",
    "eth_estimateGas": "0x7530",
    "eth_sendRawTransaction": "0x" + "ab" * 32,
    "eth_getTransactionReceipt": {"blockNumber": "0x64", "status": "0x1", "gasUsed": "0x7000"},
}


class FakeRpc:
    """
    Scripted stand-in for RpcClient.

    Responses are queued per (url, method); the last queued response
    repeats once the queue is down to one. Exceptions are raised.
    Unscripted methods fall back to DEFAULT_RESPONSES.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, list]] = []
        self._scripts: dict[tuple[str, str], deque] = defaultdict(deque)

    def script(self, url: str, method: str, *responses: Any) -> "FakeRpc":
        self._scripts[(url, method)].extend(responses)
        return self

    def call(self, url: str, method: str, params: list) -> Any:
        self.calls.append((url, method, params))
        queue = self._scripts.get((url, method))
        if queue:
            response = queue.popleft() if len(queue) > 1 else queue[0]
        else:
            response = DEFAULT_RESPONSES[method]
        if isinstance(response, BaseException):
            raise response
        return response

    def calls_to(self, method: str, url: str | None = None) -> list[tuple[str, str, list]]:
        return [c for c in self.calls if c[1] == method and (url is None or c[0] == url)]


class StaticKeyStore:
    def __init__(self, private_key: str | None = TEST_PRIVATE_KEY) -> None:
        self.private_key = private_key
        self.decrypt_count = 0

    def key_exists(self) -> bool:
        return self.private_key is not None

    def decrypt_key(self) -> str:
        self.decrypt_count += 1
        if self.private_key is None:
            raise KeyNotFoundError("Key file not found")
        return self.private_key


class RecordingSleep:
    def __init__(self, clock: "FakeClock | None" = None) -> None:
        self.calls: list[float] = []
        self._clock = clock

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._clock is not None:
            self._clock.now += seconds


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def fake_rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture()
def keystore() -> StaticKeyStore:
    return StaticKeyStore()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        encryption_key="test-passphrase",
        endpoints=build_endpoints(DRPC_URL, RONIN_URL),
        max_retries=3,
        retry_delay=5.0,
        confirmation_timeout=30.0,
        poll_interval=5.0,
        progress_interval=15.0,
    )


@pytest.fixture()
def dry_run_settings(settings: Settings) -> Settings:
    return replace(settings, dry_run=True)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def poll_sleep(clock: FakeClock) -> RecordingSleep:
    """Sleep that advances the fake clock (used by the confirmation poller)."""
    return RecordingSleep(clock)


@pytest.fixture()
def retry_sleep() -> RecordingSleep:
    """Sleep that only records (used between retry rounds)."""
    return RecordingSleep()


@pytest.fixture()
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture()
def account(private_key: str) -> LocalAccount:
    return Account.from_key(private_key)


@pytest.fixture()
def empty_keystore() -> StaticKeyStore:
    return StaticKeyStore(private_key=None)
