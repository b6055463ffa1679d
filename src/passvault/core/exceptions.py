"""
Exceptions for passvault
Everything raised by the vault derives from PassVaultError so callers have a
single error catcher.
"""

AUTH_FAILURE_MESSAGE = "Decryption failed - incorrect password or corrupted file"


class PassVaultError(Exception):
    # general container for errors
    pass


class KeyDerivationError(PassVaultError):
    # raised when the password hash function reports an internal failure
    pass


class AuthenticationError(PassVaultError):
    # raised when an AEAD tag does not verify (wrong password OR corrupted data)

    def __init__(self, message: str = AUTH_FAILURE_MESSAGE):
        super().__init__(message)


class FileError(PassVaultError):
    # raised on missing / undersized / malformed vault files and I/O failures
    pass


class NotFoundError(PassVaultError):
    # raised when a username is not in the entry list
    pass


class DuplicateEntryError(PassVaultError):
    # raised when adding a username that already exists
    pass


class EmptyInputError(PassVaultError):
    # raised for empty passwords, usernames or secrets before any crypto call
    pass


class VaultClosedError(PassVaultError):
    # raised when an operation needs an open vault
    pass


class SessionError(PassVaultError):
    pass


class SessionLockedError(SessionError):
    # raised when session keys are requested after close
    pass


class SessionExpiredError(SessionError):
    # raised when the session deadline passed; the session is wiped first
    pass
