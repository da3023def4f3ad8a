import pytest
from pydantic import ValidationError

from wallet_session.config import Settings


def test_defaults(monkeypatch):
    """Defaults give a 120 second confirmation window on mainnet."""

    for name in ("NETWORK", "RECEIPT_POLL_INTERVAL_SECONDS", "RECEIPT_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.network == "mainnet"
    assert settings.confirmation_window_seconds == 120.0


def test_network_is_normalized(monkeypatch):
    monkeypatch.setenv("NETWORK", " TestNet ")

    settings = Settings(_env_file=None)

    assert settings.network == "testnet"


def test_receipt_polling_from_env(monkeypatch):
    monkeypatch.setenv("RECEIPT_POLL_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("RECEIPT_MAX_ATTEMPTS", "10")

    settings = Settings(_env_file=None)

    assert settings.receipt_poll_interval_seconds == 0.5
    assert settings.receipt_max_attempts == 10
    assert settings.confirmation_window_seconds == 5.0


def test_receipt_attempts_must_be_positive(monkeypatch):
    monkeypatch.setenv("RECEIPT_MAX_ATTEMPTS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_rpc_url_overrides(monkeypatch):
    monkeypatch.setenv("ESPACE_RPC_URL", "http://localhost:8545")
    monkeypatch.delenv("CORE_RPC_URL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.rpc_url_for("espace") == "http://localhost:8545"
    assert settings.rpc_url_for("core") == ""
    assert settings.rpc_url_for("alpha") == ""


def test_log_format_from_env(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "console")

    assert Settings(_env_file=None).log_format == "console"

    monkeypatch.setenv("LOG_FORMAT", "xml")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
