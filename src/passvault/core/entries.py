"""
Entry store: per-entry secondary encryption and (de)serialization.

Every function here is a pure transform over data owned by the caller
(:class:`passvault.core.vault.Vault`). Nothing is cached between calls.

Decrypted vault payload (UTF-8 JSON array):
==============================
 [
   {"username": "...", "encryptedPassword": "<base64 blob>"},
   {"username": "...", "password": "..."}    <- legacy, migrated on load
 ]
==============================
Blob: individualSalt(16) || nonce(24) || ciphertext||tag, where the key is
Argon2id(entry_master_key, individualSalt). A fresh salt per entry means equal
secrets never produce equal blobs, and one entry's derived key says nothing
about any other entry.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import List, Optional, Tuple, Union

from ..security import aead
from ..security.kdf import INTERACTIVE, SALT_SIZE, KdfParams, derive_key, generate_salt
from ..security.secrets import SecretBuffer, scoped_secret
from .exceptions import (
    AuthenticationError,
    DuplicateEntryError,
    EmptyInputError,
    FileError,
    NotFoundError,
)
from .models import VaultEntry

logger = logging.getLogger(__name__)

MIN_BLOB_SIZE = SALT_SIZE + aead.NONCE_SIZE + aead.TAG_SIZE

FIELD_USERNAME = "username"
FIELD_ENCRYPTED = "encryptedPassword"
FIELD_LEGACY = "password"

Secret = Union[str, bytes, bytearray]


# ----------------------------------------------------------------------
# Per-entry encryption
# ----------------------------------------------------------------------


def encrypt_entry_secret(
    plaintext: Secret,
    entry_master_key: Optional[Union[bytes, bytearray]],
    params: KdfParams = INTERACTIVE,
) -> bytes:
    """Encrypt one secret and return ``salt || nonce || ciphertext``."""
    if not plaintext:
        raise EmptyInputError("Secret cannot be empty")
    if not entry_master_key:
        raise AuthenticationError()

    salt = generate_salt()
    with SecretBuffer(derive_key(entry_master_key, salt, params)) as key, \
            scoped_secret(plaintext) as pt:
        nonce, ct = aead.encrypt(pt, key.raw)
    return salt + nonce + ct


def decrypt_entry_secret(
    blob: bytes,
    entry_master_key: Optional[Union[bytes, bytearray]],
    params: KdfParams = INTERACTIVE,
) -> bytearray:
    """Decrypt a blob from :func:`encrypt_entry_secret`.

    Returns a bytearray the caller must wipe. A missing or zeroed master key
    (closed session) and a malformed blob fail like a wrong key does.
    """
    if not entry_master_key or not any(entry_master_key) or len(blob) < MIN_BLOB_SIZE:
        raise AuthenticationError()

    salt = blob[:SALT_SIZE]
    nonce = blob[SALT_SIZE:SALT_SIZE + aead.NONCE_SIZE]
    ct = blob[SALT_SIZE + aead.NONCE_SIZE:]
    with SecretBuffer(derive_key(entry_master_key, salt, params)) as key:
        return aead.decrypt(ct, key.raw, nonce)


# ----------------------------------------------------------------------
# Load / serialize
# ----------------------------------------------------------------------


def _decode_blob(value, username: str) -> bytes:
    if not isinstance(value, str):
        raise FileError(f"Malformed vault payload: bad {FIELD_ENCRYPTED} for '{username}'")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FileError(f"Malformed vault payload: bad {FIELD_ENCRYPTED} for '{username}'") from e


def load(
    decrypted_blob: Union[bytes, bytearray],
    entry_master_key: Union[bytes, bytearray],
    params: KdfParams = INTERACTIVE,
) -> Tuple[List[VaultEntry], int]:
    """Parse the decrypted payload into entries.

    Legacy records that carry a plaintext ``password`` are encrypted on the
    spot. Returns ``(entries, migrated_count)``; when ``migrated_count`` is
    non-zero the caller should persist so the plaintext leaves the file.
    """
    try:
        doc = json.loads(decrypted_blob) if decrypted_blob else []
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FileError("Malformed vault payload: not valid JSON") from e
    if not isinstance(doc, list):
        raise FileError("Malformed vault payload: expected a list of entries")

    entries: List[VaultEntry] = []
    migrated = 0
    for item in doc:
        if not isinstance(item, dict):
            raise FileError("Malformed vault payload: entry is not an object")
        username = item.get(FIELD_USERNAME)
        if not isinstance(username, str):
            raise FileError("Malformed vault payload: entry without username")

        if FIELD_ENCRYPTED in item:
            entries.append(VaultEntry(username, _decode_blob(item[FIELD_ENCRYPTED], username)))
        elif isinstance(item.get(FIELD_LEGACY), str):
            legacy = item.pop(FIELD_LEGACY)
            entries.append(
                VaultEntry(username, encrypt_entry_secret(legacy, entry_master_key, params))
            )
            del legacy
            migrated += 1
        else:
            raise FileError(f"Malformed vault payload: no secret for '{username}'")

    if migrated:
        logger.info("Migrated %d legacy plaintext entr%s", migrated, "y" if migrated == 1 else "ies")
    return entries, migrated


def serialize(entries: List[VaultEntry]) -> bytes:
    """Canonical payload: ordered ``[{username, encryptedPassword}]``."""
    records = [
        {
            FIELD_USERNAME: e.username,
            FIELD_ENCRYPTED: base64.b64encode(e.encrypted_secret).decode("ascii"),
        }
        for e in entries
    ]
    return json.dumps(records, ensure_ascii=False).encode("utf-8")


# ----------------------------------------------------------------------
# List helpers
# ----------------------------------------------------------------------


def find(entries: List[VaultEntry], username: str) -> Optional[VaultEntry]:
    for entry in entries:
        if entry.username == username:
            return entry
    return None


def _require(entries: List[VaultEntry], username: str) -> VaultEntry:
    entry = find(entries, username)
    if entry is None:
        raise NotFoundError(f"No entry for username '{username}'")
    return entry


def add_entry(
    entries: List[VaultEntry],
    username: str,
    secret: Secret,
    entry_master_key: Union[bytes, bytearray],
    params: KdfParams = INTERACTIVE,
) -> VaultEntry:
    if not username:
        raise EmptyInputError("Username cannot be empty")
    if not secret:
        raise EmptyInputError("Secret cannot be empty")
    if find(entries, username) is not None:
        raise DuplicateEntryError(f"Entry for username '{username}' already exists")

    entry = VaultEntry(username, encrypt_entry_secret(secret, entry_master_key, params))
    entries.append(entry)
    return entry


def update_entry(
    entries: List[VaultEntry],
    username: str,
    new_secret: Secret,
    entry_master_key: Union[bytes, bytearray],
    params: KdfParams = INTERACTIVE,
) -> VaultEntry:
    if not new_secret:
        raise EmptyInputError("Secret cannot be empty")
    entry = _require(entries, username)
    entry.encrypted_secret = encrypt_entry_secret(new_secret, entry_master_key, params)
    return entry


def remove_entry(entries: List[VaultEntry], username: str) -> VaultEntry:
    entry = _require(entries, username)
    entries.remove(entry)
    return entry
