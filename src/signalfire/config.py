"""
Configuration - immutable process-wide settings.

Values come from the environment, optionally seeded from a ``.env`` file
via python-dotenv. Variables already set in the environment win over the
file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from .chain.calldata import to_checksum_address
from .chain.endpoints import Endpoint, FeeModel
from .chain.fees import FeeMagnitudes, gwei_to_wei
from .errors import ConfigError

T = TypeVar("T")

DEFAULT_RONIN_RPC_URL = "https://api.roninchain.com/rpc"
DEFAULT_CONTRACT_ADDRESS = "0x1136dac182ab639632a38540c6f33c01e02e51a6"
DEFAULT_CHAIN_ID = 2020  # Ronin mainnet
DEFAULT_PRIORITY_FEE_GWEI = "20"
DEFAULT_MAX_FEE_GWEI = "2"
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 5.0
DEFAULT_CONFIRMATION_TIMEOUT = 180.0
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_PROGRESS_INTERVAL = 15.0
DEFAULT_RPC_TIMEOUT = 10.0

DRPC_NAME = "dRPC"
RONIN_NAME = "Ronin RPC"

# Which fee fields each known endpoint accepts. Endpoints are looked up by
# display name when the endpoint list is built.
ENDPOINT_FEE_MODELS: dict[str, FeeModel] = {
    DRPC_NAME: FeeModel.DYNAMIC,
    RONIN_NAME: FeeModel.LEGACY,
}

REQUIRED_ENV_VARS = ("ENCRYPTION_KEY", "DRPC_ENDPOINT")


@dataclass(frozen=True)
class Settings:
    encryption_key: str
    endpoints: tuple[Endpoint, ...]
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    chain_id: int = DEFAULT_CHAIN_ID
    fees: FeeMagnitudes = FeeMagnitudes(
        Decimal(DEFAULT_PRIORITY_FEE_GWEI), Decimal(DEFAULT_MAX_FEE_GWEI)
    )
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    key_file: Path = Path(".key")
    log_dir: Path = Path("logs")
    dry_run: bool = False


def build_endpoints(drpc_url: str, ronin_url: str = DEFAULT_RONIN_RPC_URL) -> tuple[Endpoint, ...]:
    """Build the ordered endpoint list; dRPC is tried first."""
    return tuple(
        Endpoint(url=url, name=name, fee_model=ENDPOINT_FEE_MODELS[name])
        for name, url in ((DRPC_NAME, drpc_url), (RONIN_NAME, ronin_url))
    )


def load_settings(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    dry_run: bool = False,
) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: ``.env`` file to load first (default: ./.env, if present)
        environ: Mapping to read instead of ``os.environ`` (skips the .env file)
        dry_run: Build transactions but never sign or broadcast them

    Raises:
        ConfigError: If required variables are missing or values are invalid
    """
    if environ is None:
        env_file = env_file or Path.cwd() / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)
        environ = os.environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")

    problems: list[str] = []

    def read(name: str, default: str, parse: Callable[[str], T]) -> Optional[T]:
        raw = environ.get(name) or default
        try:
            return parse(raw)
        except (ValueError, InvalidOperation):
            problems.append(f"{name}={raw!r}")
            return None

    contract_address = read("CONTRACT_ADDRESS", DEFAULT_CONTRACT_ADDRESS, to_checksum_address)
    chain_id = read("CHAIN_ID", str(DEFAULT_CHAIN_ID), int)
    priority = read("PRIORITY_FEE_GWEI", DEFAULT_PRIORITY_FEE_GWEI, _parse_gwei)
    max_fee = read("MAX_FEE_GWEI", DEFAULT_MAX_FEE_GWEI, _parse_gwei)
    max_retries = read("MAX_RETRIES", str(DEFAULT_MAX_RETRIES), int)
    retry_delay = read("RETRY_DELAY", str(DEFAULT_RETRY_DELAY), float)
    timeout = read("CONFIRMATION_TIMEOUT", str(DEFAULT_CONFIRMATION_TIMEOUT), float)
    poll_interval = read("POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL), float)
    progress_interval = read("PROGRESS_INTERVAL", str(DEFAULT_PROGRESS_INTERVAL), float)
    rpc_timeout = read("RPC_TIMEOUT", str(DEFAULT_RPC_TIMEOUT), float)

    if problems:
        raise ConfigError(f"Invalid configuration value(s): {', '.join(problems)}")

    if max_retries < 1:
        problems.append("MAX_RETRIES must be at least 1")
    if timeout <= 0:
        problems.append("CONFIRMATION_TIMEOUT must be positive")
    if poll_interval <= 0:
        problems.append("POLL_INTERVAL must be positive")
    if progress_interval <= 0:
        problems.append("PROGRESS_INTERVAL must be positive")
    if rpc_timeout <= 0:
        problems.append("RPC_TIMEOUT must be positive")
    if retry_delay < 0:
        problems.append("RETRY_DELAY must not be negative")
    if problems:
        raise ConfigError("; ".join(problems))

    return Settings(
        encryption_key=environ["ENCRYPTION_KEY"],
        endpoints=build_endpoints(
            environ["DRPC_ENDPOINT"],
            environ.get("RONIN_RPC_URL") or DEFAULT_RONIN_RPC_URL,
        ),
        contract_address=contract_address,
        chain_id=chain_id,
        fees=FeeMagnitudes(priority_gwei=priority, max_gwei=max_fee),
        max_retries=max_retries,
        retry_delay=retry_delay,
        confirmation_timeout=timeout,
        poll_interval=poll_interval,
        progress_interval=progress_interval,
        rpc_timeout=rpc_timeout,
        key_file=Path(environ.get("SIGNALFIRE_KEY_FILE") or Path.cwd() / ".key"),
        log_dir=Path(environ.get("SIGNALFIRE_LOG_DIR") or Path.cwd() / "logs"),
        dry_run=dry_run,
    )


def _parse_gwei(raw: str) -> Decimal:
    amount = Decimal(raw)
    if not amount.is_finite():
        raise ValueError(raw)
    gwei_to_wei(amount)
    return amount
