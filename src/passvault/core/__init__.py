"""Vault file codec, entry store and the Vault orchestrator."""

from .exceptions import (
    PassVaultError,
    KeyDerivationError,
    AuthenticationError,
    FileError,
    NotFoundError,
    DuplicateEntryError,
    EmptyInputError,
    VaultClosedError,
    SessionError,
    SessionLockedError,
    SessionExpiredError,
)
from .models import VaultEntry
from .config import VaultConfig
from .events import Event, EventBus, EventType, record_events
from .vault import Vault, VaultState

__all__ = [
    "PassVaultError",
    "KeyDerivationError",
    "AuthenticationError",
    "FileError",
    "NotFoundError",
    "DuplicateEntryError",
    "EmptyInputError",
    "VaultClosedError",
    "SessionError",
    "SessionLockedError",
    "SessionExpiredError",
    "VaultEntry",
    "VaultConfig",
    "Event",
    "EventBus",
    "EventType",
    "record_events",
    "Vault",
    "VaultState",
]
