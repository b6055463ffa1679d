"""Unit tests for configuration and logging setup."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from passvault.core.config import VaultConfig
from passvault.logging_config import configure_logging
from passvault.security.kdf import INTERACTIVE, KdfParams


def test_defaults():
    config = VaultConfig()
    assert config.session_timeout == 900
    assert config.kdf == INTERACTIVE
    assert config.default_path == Path("vault.bin")


def test_from_env_empty():
    assert VaultConfig.from_env({}) == VaultConfig()


def test_from_env_overrides():
    config = VaultConfig.from_env(
        {
            "PASSVAULT_PATH": "/tmp/my.vault",
            "PASSVAULT_SESSION_TIMEOUT": "60",
            "PASSVAULT_KDF_TIME_COST": "1",
            "PASSVAULT_KDF_MEMORY_COST": "8",
            "PASSVAULT_KDF_PARALLELISM": "1",
        }
    )
    assert config.default_path == Path("/tmp/my.vault")
    assert config.session_timeout == 60.0
    assert config.kdf == KdfParams(time_cost=1, memory_cost=8, parallelism=1)


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("PASSVAULT_SESSION_TIMEOUT", "120")
    assert VaultConfig.from_env().session_timeout == 120.0


def test_from_env_invalid_number():
    with pytest.raises(ValueError, match="PASSVAULT_KDF_TIME_COST"):
        VaultConfig.from_env({"PASSVAULT_KDF_TIME_COST": "fast"})


@pytest.mark.parametrize("timeout", ["0", "-5"])
def test_non_positive_timeout_rejected(timeout):
    with pytest.raises(ValueError, match="session_timeout"):
        VaultConfig.from_env({"PASSVAULT_SESSION_TIMEOUT": timeout})


def test_from_env_log_level():
    assert VaultConfig.from_env({}).log_level == "INFO"
    assert VaultConfig.from_env({"PASSVAULT_LOG_LEVEL": "debug"}).log_level == "debug"


def test_configure_logging():
    with patch("logging.basicConfig") as mock_basic:
        assert configure_logging(logging.DEBUG) == logging.DEBUG
    kwargs = mock_basic.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    assert "%(name)s" in kwargs["format"]
    logging.getLogger("passvault").setLevel(logging.NOTSET)


def test_configure_logging_level_from_config():
    config = VaultConfig.from_env({"PASSVAULT_LOG_LEVEL": "warning"})
    with patch("logging.basicConfig") as mock_basic:
        assert configure_logging(config=config) == logging.WARNING
    assert mock_basic.call_args.kwargs["level"] == logging.WARNING
    assert logging.getLogger("passvault").level == logging.WARNING
    logging.getLogger("passvault").setLevel(logging.NOTSET)


def test_configure_logging_unknown_level():
    with patch("logging.basicConfig") as mock_basic:
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("chatty")
    mock_basic.assert_not_called()
