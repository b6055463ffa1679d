"""Argon2id key derivation for passvault."""
import logging
import os
from dataclasses import dataclass
from typing import Dict, Union

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

from ..core.exceptions import KeyDerivationError

logger = logging.getLogger(__name__)

SALT_SIZE = 16
KEY_SIZE = 32


@dataclass(frozen=True)
class KdfParams:
    """Argon2id cost parameters (memory_cost is in KiB)."""

    time_cost: int = 2
    memory_cost: int = 65536
    parallelism: int = 1

    def to_dict(self) -> Dict:
        return {
            "algo": "argon2id",
            "time": self.time_cost,
            "memory": self.memory_cost,
            "parallelism": self.parallelism,
        }


# Same limits as libsodium's crypto_pwhash OPSLIMIT/MEMLIMIT_INTERACTIVE, so
# keys match vaults written by libsodium-based clients.
INTERACTIVE = KdfParams()


def generate_salt(length: int = SALT_SIZE) -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(length)


def derive_key(
    password: Union[bytes, bytearray, str],
    salt: bytes,
    params: KdfParams = INTERACTIVE,
    key_len: int = KEY_SIZE,
) -> bytes:
    """
    Derive a key from a password using Argon2id.
    Returns raw derived key bytes.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")

    try:
        return hash_secret_raw(
            secret=bytes(password),
            salt=bytes(salt),
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=key_len,
            type=Type.ID,
        )
    except HashingError as e:
        logger.warning("Key derivation failed (%s)", params.to_dict())
        raise KeyDerivationError("Key derivation failed") from e
