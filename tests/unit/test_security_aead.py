"""
Unit tests for the XChaCha20-Poly1305 primitives.
"""

import os

import pytest

from passvault.core.exceptions import AuthenticationError
from passvault.security.aead import (
    NONCE_SIZE,
    TAG_SIZE,
    decrypt,
    decrypt_result,
    encrypt,
)


@pytest.fixture
def key():
    return os.urandom(32)


# ==============================================================================
# Tests: Round trip
# ==============================================================================

@pytest.mark.parametrize("plaintext", [b"", b"a", b"[]", os.urandom(1000)])
def test_round_trip(key, plaintext):
    nonce, ct = encrypt(plaintext, key)
    assert len(nonce) == NONCE_SIZE == 24
    assert len(ct) == len(plaintext) + TAG_SIZE
    assert decrypt(ct, key, nonce) == plaintext


def test_decrypt_returns_wipeable_bytearray(key):
    nonce, ct = encrypt(b"secret", key)
    pt = decrypt(ct, key, nonce)
    assert isinstance(pt, bytearray)


def test_encrypt_accepts_bytearray_key(key):
    nonce, ct = encrypt(b"data", bytearray(key))
    assert decrypt(ct, bytearray(key), nonce) == b"data"


def test_encrypt_rejects_bad_key():
    with pytest.raises(ValueError):
        encrypt(b"data", b"short")


# ==============================================================================
# Tests: Authentication failures
# ==============================================================================

def test_wrong_key_fails(key):
    nonce, ct = encrypt(b"payload", key)
    with pytest.raises(AuthenticationError):
        decrypt(ct, os.urandom(32), nonce)


def test_tampered_ciphertext_fails(key):
    nonce, ct = encrypt(b"payload", key)
    tampered = bytearray(ct)
    tampered[0] ^= 0x01
    with pytest.raises(AuthenticationError):
        decrypt(bytes(tampered), key, nonce)


def test_wrong_nonce_fails(key):
    _, ct = encrypt(b"payload", key)
    with pytest.raises(AuthenticationError):
        decrypt(ct, key, os.urandom(NONCE_SIZE))


@pytest.mark.parametrize(
    "ct, k, nonce",
    [
        (b"x" * (TAG_SIZE - 1), os.urandom(32), os.urandom(NONCE_SIZE)),
        (b"x" * TAG_SIZE, None, os.urandom(NONCE_SIZE)),
        (b"x" * TAG_SIZE, b"\x00" * 16, os.urandom(NONCE_SIZE)),
        (b"x" * TAG_SIZE, os.urandom(32), os.urandom(12)),
    ],
)
def test_malformed_inputs_fail_as_authentication(ct, k, nonce):
    with pytest.raises(AuthenticationError):
        decrypt(ct, k, nonce)


def test_wrong_key_and_corruption_are_indistinguishable(key):
    nonce, ct = encrypt(b"payload", key)
    with pytest.raises(AuthenticationError) as wrong_key:
        decrypt(ct, os.urandom(32), nonce)
    with pytest.raises(AuthenticationError) as corrupted:
        decrypt(ct[:-1] + bytes([ct[-1] ^ 0xFF]), key, nonce)

    assert type(wrong_key.value) is type(corrupted.value)
    assert str(wrong_key.value) == str(corrupted.value)
    assert wrong_key.value.__cause__ is None
    assert corrupted.value.__cause__ is None


# ==============================================================================
# Tests: Nonce discipline
# ==============================================================================

def test_nonces_never_repeat(key):
    """10,000 encryptions under one key produce 10,000 distinct nonces."""
    nonces = {encrypt(b"x", key)[0] for _ in range(10_000)}
    assert len(nonces) == 10_000


# ==============================================================================
# Tests: Result form
# ==============================================================================

def test_decrypt_result_ok(key):
    nonce, ct = encrypt(b"hello", key)
    result = decrypt_result(ct, key, nonce)
    assert result.ok
    assert result.plaintext == b"hello"
    assert result.error_kind is None


def test_decrypt_result_failure(key):
    nonce, ct = encrypt(b"hello", key)
    result = decrypt_result(ct, os.urandom(32), nonce)
    assert not result.ok
    assert result.plaintext is None
    assert result.error_kind == "authentication"
