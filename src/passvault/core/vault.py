"""
Vault orchestrator: open/close plus entry CRUD over an encrypted vault file.

States: CLOSED -> open() -> OPEN -> close() / session timeout -> CLOSED

The Vault exclusively owns the session keys and the in-memory entry list.
Mutations rewrite the whole payload: serialize -> encrypt with the session's
vault key -> atomic file write. Errors are never swallowed; on failure during
open every derived secret is wiped and the error is re-raised unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from ..security import aead
from ..security.secrets import SecretBuffer, wipe
from ..security.session import SessionManager
from . import entries as store
from . import vault_file
from .config import VaultConfig
from .events import EventBus, EventType
from .exceptions import (
    EmptyInputError,
    NotFoundError,
    PassVaultError,
    SessionExpiredError,
    VaultClosedError,
)
from .models import VaultEntry

logger = logging.getLogger(__name__)

REASON_MANUAL = "manual"
REASON_TIMEOUT = "timeout"


class VaultState(Enum):
    CLOSED = "closed"
    OPEN = "open"


class Vault:
    """A single password vault file and its session."""

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        events: Optional[EventBus] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.config = config or VaultConfig.from_env()
        self.events = events or EventBus()
        self.loop = loop
        self.state = VaultState.CLOSED
        self._path: Optional[Path] = None
        self._session: Optional[SessionManager] = None
        self._entries: List[VaultEntry] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state is VaultState.OPEN

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def session(self) -> Optional[SessionManager]:
        return self._session

    # ------------------------------------------------------------------
    # Listener hooks
    # ------------------------------------------------------------------

    def on_vault_opened(self, callback: Callable[[Path], None]) -> None:
        self.events.subscribe(EventType.VAULT_OPENED, lambda e: callback(e.data["path"]))

    def on_vault_closed(self, callback: Callable[[str], None]) -> None:
        self.events.subscribe(EventType.VAULT_CLOSED, lambda e: callback(e.data["reason"]))

    def on_entry_added(self, callback: Callable[[VaultEntry], None]) -> None:
        self.events.subscribe(EventType.ENTRY_ADDED, lambda e: callback(e.data["entry"]))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, path: Union[str, Path, None], password: str) -> None:
        """
        Open (creating if missing) the vault at ``path``.

        Raises AuthenticationError for a wrong password or corrupted payload
        (indistinguishable), FileError for missing/undersized/malformed files
        and EmptyInputError for an empty password. The vault stays CLOSED on
        any failure.
        """
        if self.is_open:
            self.close()
        if not password:
            raise EmptyInputError("Password cannot be empty")

        path = Path(path) if path is not None else self.config.default_path
        params = self.config.kdf

        if not vault_file.exists(path):
            logger.info("Vault %s does not exist, creating it", path)
            vault_file.create_vault(path, password, vault_file.EMPTY_PAYLOAD, params)

        frame = vault_file.read_vault_file(path)
        session = SessionManager(
            timeout=self.config.session_timeout,
            params=params,
            loop=self.loop,
            on_expire=self._on_session_expired,
        )

        decrypted: Optional[bytearray] = None
        try:
            session.start(password, frame.salt)
            vault_key, entry_key = session.held_keys()
            decrypted = aead.decrypt(frame.ciphertext, vault_key, frame.nonce)
            loaded, migrated = store.load(decrypted, entry_key, params)
        except BaseException:
            session.close()
            logger.warning("Failed to open vault %s", path)
            raise
        finally:
            wipe(decrypted)

        self._session = session
        self._entries = loaded
        self._path = path
        self.state = VaultState.OPEN

        if migrated:
            try:
                self._persist(session.held_keys()[0])
            except PassVaultError:
                self._teardown(None)
                raise

        logger.info("Opened vault %s with %d entries", path, len(loaded))
        self.events.emit_simple(EventType.VAULT_OPENED, path=path)

    def close(self) -> None:
        """Wipe keys and entries. No-op when already closed."""
        if not self.is_open:
            return
        self._teardown(REASON_MANUAL)

    def check_expiry(self) -> bool:
        """Poll the session deadline; closes with reason "timeout" if due."""
        if not self.is_open or self._session is None:
            return False
        return self._session.check_expiry()

    def _on_session_expired(self) -> None:
        if self.is_open:
            self._teardown(REASON_TIMEOUT)

    def _teardown(self, reason: Optional[str]) -> None:
        if self._session is not None:
            self._session.close()
        self._session = None
        self._entries.clear()
        self._entries = []
        self.events.clear_history(EventType.ENTRY_ADDED)
        self.state = VaultState.CLOSED
        if reason is not None:
            logger.info("Vault %s closed (%s)", self._path, reason)
            self.events.emit_simple(EventType.VAULT_CLOSED, reason=reason)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _require_open(self) -> SessionManager:
        # The only deadline check of a public call; keys are read through
        # held_keys() afterwards so expiry never lands mid-operation.
        if not self.is_open or self._session is None:
            raise VaultClosedError("Vault is not open")
        if self._session.check_expiry():
            raise SessionExpiredError("Session expired and was locked")
        return self._session

    def _persist(self, vault_key: bytearray) -> None:
        with SecretBuffer(store.serialize(self._entries)) as payload:
            vault_file.update_vault(self._path, vault_key, payload.raw)

    def list_entries(self) -> List[dict]:
        self._require_open()
        return [e.to_public_dict() for e in self._entries]

    def add_entry(self, username: str, secret: str) -> VaultEntry:
        session = self._require_open()
        _check_text(secret)
        vault_key, entry_key = session.held_keys()
        entry = store.add_entry(self._entries, username, secret, entry_key, self.config.kdf)
        self._persist(vault_key)
        session.touch()
        logger.info("Added entry '%s'", username)
        self.events.emit_simple(EventType.ENTRY_ADDED, entry=entry)
        return entry

    def update_entry(self, username: str, new_secret: str) -> VaultEntry:
        session = self._require_open()
        _check_text(new_secret)
        vault_key, entry_key = session.held_keys()
        entry = store.update_entry(
            self._entries, username, new_secret, entry_key, self.config.kdf
        )
        self._persist(vault_key)
        session.touch()
        logger.info("Updated entry '%s'", username)
        return entry

    def remove_entry(self, username: str) -> VaultEntry:
        session = self._require_open()
        vault_key, _ = session.held_keys()
        entry = store.remove_entry(self._entries, username)
        self._persist(vault_key)
        session.touch()
        logger.info("Removed entry '%s'", username)
        return entry

    @contextmanager
    def reveal(self, username: str) -> Iterator[bytearray]:
        """Yield the decrypted secret as a bytearray wiped when the block exits."""
        session = self._require_open()
        entry = store.find(self._entries, username)
        if entry is None:
            raise NotFoundError(f"No entry for username '{username}'")
        _, entry_key = session.held_keys()
        with SecretBuffer.adopt(
            store.decrypt_entry_secret(entry.encrypted_secret, entry_key, self.config.kdf)
        ) as secret:
            session.touch()
            yield secret.raw

    def get_secret(self, username: str) -> str:
        """Decrypt the secret for ``username`` and extend the session."""
        with self.reveal(username) as secret:
            return secret.decode("utf-8")


def _check_text(secret) -> None:
    # get_secret() hands secrets back as str, so only str goes in
    if not isinstance(secret, str):
        raise TypeError(f"secret must be str, not {type(secret).__name__}")
