"""
Error hierarchy for Signal Fire.

Every error carries an ``exit_code`` so the CLI can terminate with a
distinct status for each fatal category.
"""

from __future__ import annotations

from typing import Any, Optional


class SignalFireError(RuntimeError):
    exit_code: int = 1


class RpcError(SignalFireError):
    """A JSON-RPC call failed (error object in the response)."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class TransportError(RpcError):
    """HTTP-level failure: connection, timeout, bad status or non-JSON body."""


class RevertError(RpcError):
    """The node reported that contract execution reverted."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=code, data=data)
        self.reason = reason


class DecodeError(SignalFireError, ValueError):
    """A numeric or hex field returned by a node could not be decoded."""


class KeyStoreError(SignalFireError):
    exit_code = 2


class KeyNotFoundError(KeyStoreError):
    pass


class DecryptionFailedError(KeyStoreError):
    pass


class ConfigError(SignalFireError):
    exit_code = 3


class SubmissionExhaustedError(SignalFireError):
    """Every endpoint failed to accept the transaction in every round."""

    exit_code = 4

    def __init__(self, rounds: int, attempts: int) -> None:
        super().__init__(
            f"Failed to send transaction after {rounds} round(s) "
            f"and {attempts} endpoint attempt(s)"
        )
        self.rounds = rounds
        self.attempts = attempts
