from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..config import Settings, load_settings
from ..errors import ConfigError
from ..keys.keystore import EncryptedKeyFile

env_file_option = click.option(
    "--env-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Load environment variables from this .env file (default: ./.env)",
)


def load_settings_or_exit(env_file: Optional[Path], dry_run: bool = False) -> Settings:
    try:
        return load_settings(env_file=env_file, dry_run=dry_run)
    except ConfigError as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)


def open_keystore(settings: Settings) -> EncryptedKeyFile:
    return EncryptedKeyFile(settings.key_file, settings.encryption_key)
