"""In-memory session holding the two keys of an open vault, with auto-lock.

On :meth:`SessionManager.start` two keys are derived from the master password:

- the vault key, from the vault file's salt, which encrypts the whole payload
- the entry master key, from ``sha256(vault_salt || "PASSWORD_ENCRYPTION")[:16]``,
  which only keys per-entry secret encryption

Disjoint salts keep the two keys independent. The session expires ``timeout``
seconds after the last :meth:`touch`. Expiry is detected two ways: a
cooperative ``loop.call_later`` timer when an asyncio loop is supplied, and a
poll on every key access. Either way both keys are zero-filled and the
``on_expire`` callback runs.
"""
from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from typing import Callable, Optional, Tuple

from ..core.exceptions import EmptyInputError, SessionExpiredError, SessionLockedError
from .kdf import INTERACTIVE, SALT_SIZE, KdfParams, derive_key
from .secrets import wipe

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15 * 60
ENTRY_SALT_LABEL = b"PASSWORD_ENCRYPTION"


def entry_salt_for(vault_salt: bytes) -> bytes:
    """Salt for the entry master key, derived from the vault salt."""
    return hashlib.sha256(bytes(vault_salt) + ENTRY_SALT_LABEL).digest()[:SALT_SIZE]


class SessionManager:
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        params: KdfParams = INTERACTIVE,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_expire: Optional[Callable[[], None]] = None,
    ):
        self.timeout = float(timeout)
        self.params = params
        self.loop = loop
        self.on_expire = on_expire
        self._vault_key: Optional[bytearray] = None
        self._entry_master_key: Optional[bytearray] = None
        self._expires_at: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, password: bytes | str, vault_salt: bytes) -> None:
        """Derive both keys from ``password`` and start the expiry deadline."""
        if not password:
            raise EmptyInputError("Password cannot be empty")
        # a restarted session never keeps the previous keys around
        self.close()

        vault_key = bytearray(derive_key(password, vault_salt, self.params))
        try:
            entry_key = bytearray(derive_key(password, entry_salt_for(vault_salt), self.params))
        except BaseException:
            wipe(vault_key)
            raise

        self._vault_key = vault_key
        self._entry_master_key = entry_key
        self.touch()
        logger.debug("Session started, expires in %.0fs", self.timeout)

    def touch(self) -> None:
        """Push the deadline ``timeout`` seconds into the future."""
        if self._vault_key is None:
            raise SessionLockedError("Session is locked")
        self._expires_at = time.time() + self.timeout
        self._schedule()

    def close(self) -> None:
        """Zero-fill both keys and stop the timer. Safe to call repeatedly."""
        self._cancel_timer()
        wipe(self._vault_key)
        wipe(self._entry_master_key)
        self._vault_key = None
        self._entry_master_key = None
        self._expires_at = None

    def check_expiry(self) -> bool:
        """Expire the session if its deadline passed; return True if it did."""
        if self._vault_key is None or self._expires_at is None:
            return False
        if time.time() >= self._expires_at:
            self._expire()
            return True
        return False

    # ------------------------------------------------------------------
    # Key access
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._vault_key is not None

    @property
    def expires_at(self) -> Optional[float]:
        return self._expires_at

    def remaining(self) -> float:
        if self._expires_at is None:
            return 0.0
        return max(0.0, self._expires_at - time.time())

    @property
    def vault_key(self) -> bytearray:
        return self._get(lambda: self._vault_key)

    @property
    def entry_master_key(self) -> bytearray:
        return self._get(lambda: self._entry_master_key)

    def held_keys(self) -> Tuple[bytearray, bytearray]:
        """Return ``(vault_key, entry_master_key)`` without polling the deadline.

        For use inside one operation whose caller already ran
        :meth:`check_expiry`; a deadline passing mid-operation does not
        lock the keys until the next check.
        """
        if self._vault_key is None or self._entry_master_key is None:
            raise SessionLockedError("Session is locked")
        return self._vault_key, self._entry_master_key

    def _get(self, getter: Callable[[], Optional[bytearray]]) -> bytearray:
        if self._vault_key is None:
            raise SessionLockedError("Session is locked")
        if self.check_expiry():
            raise SessionExpiredError("Session expired and was locked")
        return getter()

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def _expire(self) -> None:
        logger.info("Session expired after %.0fs of inactivity", self.timeout)
        self.close()
        if self.on_expire is not None:
            self.on_expire()

    def _on_timer(self) -> None:
        self._timer = None
        if self._vault_key is not None:
            self._expire()

    def _schedule(self) -> None:
        if self.loop is None:
            return
        self._cancel_timer()
        self._timer = self.loop.call_later(self.timeout, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
