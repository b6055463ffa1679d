"""
Data models for vault entries
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class VaultEntry:
    """A username and its secret, held only in encrypted form.

    ``encrypted_secret`` is ``salt(16) || nonce(24) || ciphertext||tag``.
    """

    username: str
    encrypted_secret: bytes

    def to_public_dict(self) -> dict:
        # what listeners and list views are allowed to see
        return {"username": self.username}

    def __repr__(self) -> str:
        return f"VaultEntry(username={self.username!r}, encrypted_secret=<{len(self.encrypted_secret)} bytes>)"
