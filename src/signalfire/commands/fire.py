"""
Fire - Send the fire() transaction.

If no encrypted key file exists yet, the interactive setup runs first.
Prints the transaction hash on success. A confirmation timeout or an
on-chain revert is reported as a warning: the transaction was broadcast
either way.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from ..chain.engine import FireEngine
from ..chain.receipts import ConfirmationState
from ..errors import SignalFireError
from ..logs import configure_logging
from .common import env_file_option, load_settings_or_exit, open_keystore
from .setup import capture_private_key


@click.command()
@click.option("--test", "dry_run", is_flag=True, help="Build the transaction but do not send it")
@env_file_option
@click.option(
    "--log-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for daily log files (default: SIGNALFIRE_LOG_DIR or ./logs)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def fire(dry_run: bool, env_file: Optional[Path], log_dir: Optional[Path], verbose: bool) -> None:
    """Send the fire() transaction."""
    settings = load_settings_or_exit(env_file, dry_run=dry_run)
    logger = configure_logging(
        log_dir or settings.log_dir,
        level=logging.DEBUG if verbose else logging.INFO,
    )

    logger.info("Lazy Signal Fire")
    logger.info("------------------------")

    keystore = open_keystore(settings)

    try:
        if not keystore.key_exists():
            logger.info("No encrypted key file found. Setting up...")
            capture_private_key(keystore)
            logger.info("Key encrypted and saved successfully!")

        logger.info("Mode: %s", "TEST" if settings.dry_run else "PRODUCTION")
        logger.info("Executing fire() transaction...")
        outcome = FireEngine(settings, keystore).run()
    except SignalFireError as exc:
        logger.error("Failed to execute transaction: %s", exc)
        sys.exit(exc.exit_code)

    if outcome.dry_run:
        click.secho("TEST MODE: transaction built but not sent.", fg="cyan")
        click.echo(f"  TX: {outcome.tx_hash}")
        return

    state = outcome.confirmation.state if outcome.confirmation else None
    if state is ConfirmationState.CONFIRMED:
        click.secho("SUCCESS: Transaction confirmed!", fg="green")
    elif state is ConfirmationState.REVERTED:
        click.secho("WARNING: Transaction was mined but reverted.", fg="yellow")
    else:
        click.secho(
            "WARNING: Transaction sent but not yet confirmed; check the explorer later.",
            fg="yellow",
        )
    click.echo(f"  TX: {outcome.tx_hash}")
    click.echo(f"  Endpoint: {outcome.endpoint.name} (round {outcome.round_number})")
