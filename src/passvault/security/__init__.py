"""Security helpers: KDF, AEAD primitives, scoped secrets and sessions for passvault.

This package provides:
- Argon2id key derivation (interactive cost tier)
- XChaCha20-Poly1305 encryption/decryption of opaque byte buffers
- wipe-on-exit holders for key material and decrypted data
- the time-bounded session that owns an open vault's keys
"""

from .kdf import KdfParams, INTERACTIVE, generate_salt, derive_key
from .aead import encrypt, decrypt, decrypt_result, generate_nonce, DecryptResult
from .secrets import SecretBuffer, scoped_secret, wipe
from .session import SessionManager, entry_salt_for
from .passwords import generate_password

__all__ = [
    "KdfParams",
    "INTERACTIVE",
    "generate_salt",
    "derive_key",
    "encrypt",
    "decrypt",
    "decrypt_result",
    "generate_nonce",
    "DecryptResult",
    "SecretBuffer",
    "scoped_secret",
    "wipe",
    "SessionManager",
    "entry_salt_for",
    "generate_password",
]
