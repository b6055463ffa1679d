"""
On-disk framing of the vault file.

Layout (binary, fixed order, no length prefixes):
==============================
 offset 0   : salt            (16 bytes)
 offset 16  : nonce           (24 bytes)
 offset 40  : ciphertext||tag (variable, to EOF)
==============================
The salt is written once when the vault is created and carried over unchanged
by every later write; the nonce is fresh for every write.

Writes go to a temporary file in the target directory which is then renamed
over the vault, so a crash mid-write leaves the previous vault intact.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..security import aead
from ..security.kdf import INTERACTIVE, SALT_SIZE, KdfParams, derive_key, generate_salt
from ..security.secrets import SecretBuffer
from .exceptions import EmptyInputError, FileError

logger = logging.getLogger(__name__)

NONCE_SIZE = aead.NONCE_SIZE
TAG_SIZE = aead.TAG_SIZE
# minimum framing for an empty plaintext
MIN_FILE_SIZE = SALT_SIZE + NONCE_SIZE + TAG_SIZE

EMPTY_PAYLOAD = b"[]"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class VaultFrame:
    salt: bytes
    nonce: bytes
    ciphertext: bytes


# ----------------------------------------------------------------------
# Low-level framing
# ----------------------------------------------------------------------


def exists(path: PathLike) -> bool:
    return Path(path).is_file()


def write_vault_file(path: PathLike, salt: bytes, nonce: bytes, ciphertext: bytes) -> None:
    """Write ``salt || nonce || ciphertext`` to ``path`` atomically."""
    if len(salt) != SALT_SIZE:
        raise FileError(f"Invalid salt size: {len(salt)} (expected {SALT_SIZE})")
    if len(nonce) != NONCE_SIZE:
        raise FileError(f"Invalid nonce size: {len(nonce)} (expected {NONCE_SIZE})")
    if not ciphertext:
        raise FileError("Ciphertext cannot be empty")

    target = Path(path)
    directory = target.parent
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=directory, prefix=f".{target.name}.", suffix=".tmp", delete=False
        ) as tmpf:
            tmp_path = Path(tmpf.name)
            tmpf.write(salt)
            tmpf.write(nonce)
            tmpf.write(ciphertext)
            tmpf.flush()
            os.fsync(tmpf.fileno())
        os.replace(tmp_path, target)
        tmp_path = None
    except OSError as e:
        logger.warning("Failed to write vault file %s: %s", target, e)
        raise FileError(f"Failed to write vault file: {target}") from e
    finally:
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                logger.debug("Could not remove temp file %s", tmp_path)
    logger.debug("Wrote vault file %s (%d bytes payload)", target, len(ciphertext))


# alias matching read_salt / validate naming
create = write_vault_file


def is_valid(path: PathLike) -> bool:
    try:
        return Path(path).stat().st_size >= MIN_FILE_SIZE
    except OSError:
        return False


def validate(path: PathLike) -> None:
    """Raise FileError unless ``path`` holds at least the minimum framing."""
    p = Path(path)
    if not p.is_file():
        raise FileError(f"Vault file does not exist: {p}")
    if not is_valid(p):
        raise FileError(f"Invalid vault file format: {p}")


def read_salt(path: PathLike) -> bytes:
    """Read only the salt, e.g. to re-derive keys without decrypting."""
    p = Path(path)
    try:
        with open(p, "rb") as f:
            salt = f.read(SALT_SIZE)
    except OSError as e:
        raise FileError(f"Cannot open vault file for reading: {p}") from e
    if len(salt) != SALT_SIZE:
        raise FileError("Failed to read complete salt from file")
    return salt


def read_vault_file(path: PathLike) -> VaultFrame:
    validate(path)
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise FileError(f"Cannot open vault file for reading: {p}") from e
    # re-check: the file may have shrunk between validate() and read
    if len(raw) < MIN_FILE_SIZE:
        raise FileError(f"Invalid vault file format: {p}")
    return VaultFrame(
        salt=raw[:SALT_SIZE],
        nonce=raw[SALT_SIZE:SALT_SIZE + NONCE_SIZE],
        ciphertext=raw[SALT_SIZE + NONCE_SIZE:],
    )


# ----------------------------------------------------------------------
# High-level helpers
# ----------------------------------------------------------------------


def create_vault(
    path: PathLike,
    password: str,
    data: bytes = EMPTY_PAYLOAD,
    params: KdfParams = INTERACTIVE,
) -> bytes:
    """Create a new vault at ``path`` holding ``data``; returns the new salt."""
    if not password:
        raise EmptyInputError("Password cannot be empty")

    salt = generate_salt()
    with SecretBuffer(derive_key(password, salt, params)) as key:
        nonce, ciphertext = aead.encrypt(data, key.raw)
    write_vault_file(path, salt, nonce, ciphertext)
    logger.info("Created vault %s", path)
    return salt


def read_vault(path: PathLike, password: str, params: KdfParams = INTERACTIVE) -> bytearray:
    """Decrypt the whole payload of ``path`` with ``password``.

    The caller owns the returned buffer and should wipe it.
    """
    if not password:
        raise EmptyInputError("Password cannot be empty")

    frame = read_vault_file(path)
    with SecretBuffer(derive_key(password, frame.salt, params)) as key:
        return aead.decrypt(frame.ciphertext, key.raw, frame.nonce)


def update_vault(path: PathLike, session_key: bytes | bytearray, data: bytes | bytearray) -> None:
    """Re-encrypt ``data`` under an already-derived key, keeping the file's salt."""
    if not session_key:
        raise EmptyInputError("Session key cannot be empty")
    if not exists(path):
        raise FileError(f"Vault file does not exist: {path}")

    salt = read_salt(path)
    nonce, ciphertext = aead.encrypt(data, session_key)
    write_vault_file(path, salt, nonce, ciphertext)
