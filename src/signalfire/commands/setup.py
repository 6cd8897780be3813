"""
Setup - Capture the operator's private key and store it encrypted.

Flow:
1. Warn the operator that the key is sensitive while being typed
2. Prompt for the key with input masking, re-prompting until it is
   64 hex characters (optional 0x prefix) forming a valid secp256k1 key
3. Encrypt it with ENCRYPTION_KEY and write the key file (mode 0600)
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..errors import KeyStoreError
from ..keys.eth import is_usable_private_key
from ..keys.keystore import EncryptedKeyFile, is_valid_private_key
from .common import env_file_option, load_settings_or_exit, open_keystore


def _validate_private_key(value: str) -> str:
    value = value.strip()
    if not is_valid_private_key(value):
        raise click.BadParameter("Invalid private key format. Must be a 64-character hex string.")
    if not is_usable_private_key(value):
        raise click.BadParameter("Not a valid secp256k1 private key.")
    return value


def capture_private_key(keystore: EncryptedKeyFile) -> Path:
    """
    Interactively read a private key and save it to ``keystore``.

    Raises:
        KeyStoreError: If the key file cannot be written
    """
    click.echo()
    click.secho("  SECURITY WARNING", fg="yellow", bold=True)
    click.secho("  Make sure no one can see your screen.", fg="yellow")
    click.secho("  Your private key will be encrypted, but it's sensitive during input.", fg="yellow")
    click.secho("  Press Ctrl+C to cancel if you're in a public place.", fg="yellow")
    click.echo()

    private_key = click.prompt(
        "Enter your private key (will be encrypted)",
        hide_input=True,
        value_proc=_validate_private_key,
    )
    try:
        path = keystore.save(private_key)
    except OSError as exc:
        raise KeyStoreError(f"Failed to encrypt and save key: {exc}") from exc
    finally:
        del private_key

    click.secho(f"Encrypted key saved to {path}", fg="green")
    return path


@click.command()
@click.option("--force", is_flag=True, help="Replace an existing key file")
@env_file_option
def setup(force: bool, env_file: Optional[Path]) -> None:
    """Encrypt and store the private key used to send fire()."""
    settings = load_settings_or_exit(env_file)
    keystore = open_keystore(settings)

    if keystore.key_exists() and not force:
        click.echo(f"Key file already exists at {settings.key_file}.")
        click.echo("Use --force to replace it.")
        return

    try:
        capture_private_key(keystore)
    except KeyStoreError as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)
