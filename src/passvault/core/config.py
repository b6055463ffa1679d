"""Runtime configuration for a vault, read from environment variables.

    PASSVAULT_PATH              default vault file (./vault.bin)
    PASSVAULT_SESSION_TIMEOUT   seconds of inactivity before auto-lock (900)
    PASSVAULT_KDF_TIME_COST     Argon2id passes (2)
    PASSVAULT_KDF_MEMORY_COST   Argon2id memory in KiB (65536)
    PASSVAULT_KDF_PARALLELISM   Argon2id lanes (1)
    PASSVAULT_LOG_LEVEL         level for configure_logging (INFO)

Changing the KDF costs of an existing vault makes it unreadable; they exist
for tests and for matching vaults written with other settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ..security.kdf import INTERACTIVE, KdfParams
from ..security.session import DEFAULT_TIMEOUT


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class VaultConfig:
    session_timeout: float = DEFAULT_TIMEOUT
    kdf: KdfParams = INTERACTIVE
    default_path: Path = field(default_factory=lambda: Path("vault.bin"))
    log_level: str = "INFO"

    def __post_init__(self):
        if self.session_timeout <= 0:
            raise ValueError("session_timeout must be positive")
        self.default_path = Path(self.default_path)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VaultConfig":
        env = os.environ if environ is None else environ
        kdf = KdfParams(
            time_cost=_read_number(env, "PASSVAULT_KDF_TIME_COST", INTERACTIVE.time_cost, int),
            memory_cost=_read_number(env, "PASSVAULT_KDF_MEMORY_COST", INTERACTIVE.memory_cost, int),
            parallelism=_read_number(env, "PASSVAULT_KDF_PARALLELISM", INTERACTIVE.parallelism, int),
        )
        return cls(
            session_timeout=_read_number(env, "PASSVAULT_SESSION_TIMEOUT", DEFAULT_TIMEOUT, float),
            kdf=kdf,
            default_path=Path(env.get("PASSVAULT_PATH") or "vault.bin"),
            log_level=env.get("PASSVAULT_LOG_LEVEL") or "INFO",
        )
