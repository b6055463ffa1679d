"""XChaCha20-Poly1305 authenticated encryption of opaque byte buffers.

Output layout of :func:`encrypt` is a ``(nonce, ciphertext || tag)`` pair.
No associated data is used. Every failure to decrypt surfaces as
:class:`~passvault.core.exceptions.AuthenticationError` with one fixed message,
so a wrong key and a corrupted ciphertext cannot be told apart.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from nacl import bindings
from nacl.exceptions import CryptoError

from ..core.exceptions import AuthenticationError
from .kdf import KEY_SIZE

logger = logging.getLogger(__name__)

NONCE_SIZE = bindings.crypto_aead_xchacha20poly1305_ietf_NPUBBYTES
TAG_SIZE = bindings.crypto_aead_xchacha20poly1305_ietf_ABYTES

Buffer = Union[bytes, bytearray, memoryview]


def generate_nonce() -> bytes:
    return os.urandom(NONCE_SIZE)


def _check_key(key: Optional[Buffer]) -> bool:
    return key is not None and len(key) == KEY_SIZE


def encrypt(plaintext: Buffer, key: Buffer) -> Tuple[bytes, bytes]:
    """Encrypt ``plaintext`` under ``key`` with a fresh random nonce.

    Returns ``(nonce, ciphertext)`` where ``ciphertext`` carries the
    16-byte tag, i.e. ``len(ciphertext) == len(plaintext) + TAG_SIZE``.
    """
    if not _check_key(key):
        raise ValueError(f"key must be {KEY_SIZE} bytes")
    nonce = generate_nonce()
    ct = bindings.crypto_aead_xchacha20poly1305_ietf_encrypt(
        bytes(plaintext), None, nonce, bytes(key)
    )
    return nonce, ct


def decrypt(ciphertext: Buffer, key: Optional[Buffer], nonce: Buffer) -> bytearray:
    """Decrypt and verify ``ciphertext``; returns a wipeable bytearray."""
    if (
        not _check_key(key)
        or len(nonce) != NONCE_SIZE
        or len(ciphertext) < TAG_SIZE
    ):
        raise AuthenticationError()
    try:
        pt = bindings.crypto_aead_xchacha20poly1305_ietf_decrypt(
            bytes(ciphertext), None, bytes(nonce), bytes(key)
        )
    except CryptoError:
        raise AuthenticationError() from None
    return bytearray(pt)


@dataclass
class DecryptResult:
    """Explicit outcome of a decryption, for callers that avoid exceptions."""

    ok: bool
    plaintext: Optional[bytearray] = None
    error_kind: Optional[str] = None


def decrypt_result(ciphertext: Buffer, key: Optional[Buffer], nonce: Buffer) -> DecryptResult:
    try:
        return DecryptResult(ok=True, plaintext=decrypt(ciphertext, key, nonce))
    except AuthenticationError:
        return DecryptResult(ok=False, error_kind="authentication")
