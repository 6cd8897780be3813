"""
Signal Fire CLI

Sends a single fire() contract call from the operator's account,
failing over between RPC endpoints and waiting for confirmation.

Commands:
  fire    - Send the fire() transaction (use --test for a dry run)
  setup   - Encrypt and store the private key
  whoami  - Show the address of the stored key
  probe   - Check which RPC endpoints are healthy
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from .chain.health import check_health
from .chain.rpc import RpcClient
from .commands.common import env_file_option, load_settings_or_exit, open_keystore
from .errors import KeyStoreError
from .keys.eth import get_address


# ============ Constants ============

VERSION = "1.0.0"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="red")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        S I G N A L   F I R E", fg="bright_white", bold=True)
        + click.style(f"    v{VERSION}", dim=True)
    )
    click.secho("        ─── one call, every endpoint ───", fg="red")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="signalfire")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Signal Fire: resilient fire() transaction sender."""
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.fire import fire
from .commands.setup import setup

cli.add_command(fire)
cli.add_command(setup)


# ============ Identity ============


@cli.command()
@env_file_option
def whoami(env_file: Optional[Path]) -> None:
    """Show the address of the stored key."""
    settings = load_settings_or_exit(env_file)
    keystore = open_keystore(settings)
    try:
        address = get_address(keystore)
    except KeyStoreError as exc:
        click.echo(f"No usable key: {exc}")
        click.echo("Run 'signalfire setup' to store one.")
        sys.exit(exc.exit_code)
    click.echo(f"Address: {address}")


# ============ Endpoint Health ============


@cli.command()
@env_file_option
def probe(env_file: Optional[Path]) -> None:
    """Check which RPC endpoints are healthy."""
    settings = load_settings_or_exit(env_file)
    client = RpcClient(timeout=settings.rpc_timeout)

    healthy = 0
    for endpoint in settings.endpoints:
        health = check_health(client, endpoint)
        if health.healthy:
            healthy += 1
            status = click.style("healthy  ", fg="green")
        else:
            status = click.style("unhealthy", fg="red")
        click.echo(
            f"  {status}  "
            + click.style(f"{endpoint.name:<10}", fg="bright_white")
            + click.style(f" [{endpoint.fee_model.value}] ", dim=True)
            + health.detail
        )

    if not healthy:
        click.secho("No healthy endpoints; 'fire' will still try all of them.", fg="yellow")
        sys.exit(1)


# ============ Entry Points ============


def main() -> None:
    """Signal Fire CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    try:
        exit_code = cli.main(standalone_mode=False)
    except (click.Abort, KeyboardInterrupt):
        click.echo("\nOperation cancelled. Exiting...")
        sys.exit(0)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
