"""
CLI integration tests using Click's test runner.

Tests verify that the CLI commands work end-to-end via the Click
CliRunner, without requiring network access or chain interaction.
The submission engine is patched out; its behaviour is covered by
the unit tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from eth_account import Account

from signalfire.chain.engine import DRY_RUN_TX_HASH, FireOutcome
from signalfire.chain.health import EndpointHealth
from signalfire.chain.receipts import Confirmation, ConfirmationState
from signalfire.cli import VERSION, cli, main
from signalfire.config import build_endpoints
from signalfire.errors import SubmissionExhaustedError
from signalfire.keys.keystore import EncryptedKeyFile

PRIVATE_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
PASSPHRASE = "correct horse battery staple"
TX_HASH = "0x" + "ab" * 32


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def key_file(tmp_path: Path) -> Path:
    return tmp_path / ".key"


@pytest.fixture()
def env(tmp_path: Path, key_file: Path, monkeypatch: pytest.MonkeyPatch):
    """Minimal environment; no ./.env is picked up from the real cwd."""
    monkeypatch.chdir(tmp_path)
    values = {
        "ENCRYPTION_KEY": PASSPHRASE,
        "DRPC_ENDPOINT": "https://drpc.test/rpc",
        "RONIN_RPC_URL": "https://ronin.test/rpc",
        "SIGNALFIRE_KEY_FILE": str(key_file),
        "SIGNALFIRE_LOG_DIR": str(tmp_path / "logs"),
    }
    with patch.dict(os.environ, values):
        yield values


@pytest.fixture()
def stored_key(env, key_file: Path) -> str:
    EncryptedKeyFile(key_file, PASSPHRASE).save(PRIVATE_KEY)
    return Account.from_key(PRIVATE_KEY).address


@pytest.fixture()
def engine():
    """Patch the engine and logging setup used by ``fire``."""
    with patch("signalfire.commands.fire.configure_logging"), patch(
        "signalfire.commands.fire.FireEngine"
    ) as engine_cls:
        yield engine_cls


def _outcome(state: ConfirmationState | None, dry_run: bool = False) -> FireOutcome:
    drpc, _ = build_endpoints("https://drpc.test/rpc")
    if dry_run:
        return FireOutcome(DRY_RUN_TX_HASH, drpc, 1, dry_run=True)
    return FireOutcome(TX_HASH, drpc, 1, Confirmation(state))


class TestVersionAndInfo:
    """Test basic CLI commands that don't require a key."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_bare_invocation_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "S I G N A L   F I R E" in result.output
        for command in ("fire", "setup", "whoami", "probe"):
            assert command in result.output


class TestSetup:
    """Test interactive key capture."""

    def test_setup_saves_encrypted_key(self, runner: CliRunner, env, key_file: Path) -> None:
        result = runner.invoke(cli, ["setup"], input=PRIVATE_KEY + "\n")

        assert result.exit_code == 0, result.output
        assert "SECURITY WARNING" in result.output
        assert "Encrypted key saved" in result.output
        assert PRIVATE_KEY not in key_file.read_text()
        assert EncryptedKeyFile(key_file, PASSPHRASE).decrypt_key() == PRIVATE_KEY

    def test_setup_reprompts_on_invalid_key(self, runner: CliRunner, env, key_file: Path) -> None:
        result = runner.invoke(cli, ["setup"], input="not-a-key\n0x" + PRIVATE_KEY + "\n")

        assert result.exit_code == 0, result.output
        assert "Invalid private key format" in result.output
        assert EncryptedKeyFile(key_file, PASSPHRASE).decrypt_key() == "0x" + PRIVATE_KEY

    def test_setup_rejects_out_of_range_key(self, runner: CliRunner, env, key_file: Path) -> None:
        result = runner.invoke(cli, ["setup"], input="0" * 64 + "\n" + PRIVATE_KEY + "\n")

        assert result.exit_code == 0, result.output
        assert "Not a valid secp256k1 private key" in result.output
        assert EncryptedKeyFile(key_file, PASSPHRASE).decrypt_key() == PRIVATE_KEY

    def test_setup_keeps_existing_key(self, runner: CliRunner, stored_key: str, key_file: Path) -> None:
        before = key_file.read_text()

        result = runner.invoke(cli, ["setup"])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert key_file.read_text() == before

    def test_setup_force_replaces_key(self, runner: CliRunner, stored_key: str, key_file: Path) -> None:
        other = "11" * 32

        result = runner.invoke(cli, ["setup", "--force"], input=other + "\n")

        assert result.exit_code == 0, result.output
        assert EncryptedKeyFile(key_file, PASSPHRASE).decrypt_key() == other


class TestWhoami:
    """Test key identity display."""

    def test_whoami_with_key(self, runner: CliRunner, stored_key: str) -> None:
        result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 0
        assert f"Address: {stored_key}" in result.output

    def test_whoami_without_key(self, runner: CliRunner, env) -> None:
        result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 2
        assert "No usable key" in result.output

    def test_whoami_wrong_passphrase(self, runner: CliRunner, stored_key: str) -> None:
        with patch.dict(os.environ, {"ENCRYPTION_KEY": "something else"}):
            result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 2
        assert "Decryption failed" in result.output


class TestFire:
    def test_confirmed(self, runner: CliRunner, stored_key: str, engine) -> None:
        engine.return_value.run.return_value = _outcome(ConfirmationState.CONFIRMED)

        result = runner.invoke(cli, ["fire"])

        assert result.exit_code == 0, result.output
        assert "SUCCESS" in result.output
        assert TX_HASH in result.output
        assert "dRPC (round 1)" in result.output
        (settings, _), _ = engine.call_args
        assert not settings.dry_run

    def test_timeout_is_not_a_failure(self, runner: CliRunner, stored_key: str, engine) -> None:
        engine.return_value.run.return_value = _outcome(ConfirmationState.TIMED_OUT)

        result = runner.invoke(cli, ["fire"])

        assert result.exit_code == 0
        assert "not yet confirmed" in result.output
        assert TX_HASH in result.output

    def test_mined_revert_is_reported(self, runner: CliRunner, stored_key: str, engine) -> None:
        engine.return_value.run.return_value = _outcome(ConfirmationState.REVERTED)

        result = runner.invoke(cli, ["fire"])

        assert result.exit_code == 0
        assert "reverted" in result.output

    def test_dry_run(self, runner: CliRunner, stored_key: str, engine) -> None:
        engine.return_value.run.return_value = _outcome(None, dry_run=True)

        result = runner.invoke(cli, ["fire", "--test"])

        assert result.exit_code == 0
        assert "TEST MODE" in result.output
        assert DRY_RUN_TX_HASH in result.output
        (settings, _), _ = engine.call_args
        assert settings.dry_run

    def test_exhausted(self, runner: CliRunner, stored_key: str, engine) -> None:
        engine.return_value.run.side_effect = SubmissionExhaustedError(rounds=3, attempts=6)

        result = runner.invoke(cli, ["fire"])

        assert result.exit_code == 4

    def test_runs_setup_when_key_missing(
        self, runner: CliRunner, env, key_file: Path, engine
    ) -> None:
        engine.return_value.run.return_value = _outcome(ConfirmationState.CONFIRMED)

        result = runner.invoke(cli, ["fire"], input=PRIVATE_KEY + "\n")

        assert result.exit_code == 0, result.output
        assert key_file.exists()
        assert engine.return_value.run.called

    def test_missing_configuration(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, engine
    ) -> None:
        monkeypatch.chdir(tmp_path)
        with patch.dict(os.environ, clear=True):
            result = runner.invoke(cli, ["fire"])

        assert result.exit_code == 3
        assert "ENCRYPTION_KEY" in result.output
        assert not engine.called

    def test_env_file_option(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, engine
    ) -> None:
        monkeypatch.chdir(tmp_path)
        key_file = tmp_path / "custom.key"
        EncryptedKeyFile(key_file, PASSPHRASE).save(PRIVATE_KEY)
        env_file = tmp_path / "fire.env"
        env_file.write_text(
            f"ENCRYPTION_KEY={PASSPHRASE}\n"
            "DRPC_ENDPOINT=https://drpc.test/rpc\n"
            f"SIGNALFIRE_KEY_FILE={key_file}\n",
            encoding="utf-8",
        )
        engine.return_value.run.return_value = _outcome(ConfirmationState.CONFIRMED)

        with patch.dict(os.environ, clear=True):
            result = runner.invoke(cli, ["fire", "--env-file", str(env_file)])

        assert result.exit_code == 0, result.output
        (settings, _), _ = engine.call_args
        assert settings.key_file == key_file

    def test_out_of_range_stored_key_exits_cleanly(
        self, runner: CliRunner, env, key_file: Path
    ) -> None:
        EncryptedKeyFile(key_file, PASSPHRASE).save("0" * 64)

        with patch("signalfire.commands.fire.configure_logging"), patch(
            "signalfire.chain.engine.RpcClient"
        ) as client_cls:
            client_cls.return_value.call.return_value = "0x10"
            result = runner.invoke(cli, ["fire"])

        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)
        methods = [c.args[1] for c in client_cls.return_value.call.call_args_list]
        assert "eth_sendRawTransaction" not in methods


class TestProbe:
    def test_reports_each_endpoint(self, runner: CliRunner, env) -> None:
        def fake_health(client, endpoint):
            return EndpointHealth(endpoint, endpoint.name == "dRPC", "block 16")

        with patch("signalfire.cli.check_health", side_effect=fake_health):
            result = runner.invoke(cli, ["probe"])

        assert result.exit_code == 0
        assert "dRPC" in result.output
        assert "Ronin RPC" in result.output
        assert "unhealthy" in result.output

    def test_no_healthy_endpoints(self, runner: CliRunner, env) -> None:
        def fake_health(client, endpoint):
            return EndpointHealth(endpoint, False, "timed out")

        with patch("signalfire.cli.check_health", side_effect=fake_health):
            result = runner.invoke(cli, ["probe"])

        assert result.exit_code == 1
        assert "No healthy endpoints" in result.output


class TestMain:
    def test_ctrl_c_exits_cleanly(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.object(cli, "main", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as excinfo:
                main()

        assert excinfo.value.code == 0
        assert "Operation cancelled" in capsys.readouterr().out
