"""passvault: a password-protected credential vault in a single encrypted file."""

from .core import (
    AuthenticationError,
    EmptyInputError,
    FileError,
    NotFoundError,
    PassVaultError,
    Vault,
    VaultConfig,
    VaultState,
)

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "EmptyInputError",
    "FileError",
    "NotFoundError",
    "PassVaultError",
    "Vault",
    "VaultConfig",
    "VaultState",
]
