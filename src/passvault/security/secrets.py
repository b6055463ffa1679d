"""Scoped holders for secret bytes.

Keys, decrypted vault payloads and decrypted entry secrets live in mutable
``bytearray`` buffers so they can be zero-filled when their owning scope ends.
Use :class:`SecretBuffer` (or :func:`scoped_secret`) as a context manager; the
wipe runs on every exit path, including exceptions.

Immutable ``bytes``/``str`` copies handed to third-party libraries cannot be
overwritten from Python; keep them short-lived.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Union

BytesLike = Union[bytes, bytearray, memoryview]


def wipe(buf: bytearray | None) -> None:
    """Zero-fill ``buf`` in place. ``None`` is ignored."""
    if buf is None:
        return
    for i in range(len(buf)):
        buf[i] = 0


def to_bytes(data: BytesLike | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class SecretBuffer:
    """A ``bytearray`` that is wiped when its ``with`` block exits."""

    __slots__ = ("_buf",)

    def __init__(self, data: BytesLike | str = b""):
        self._buf = bytearray(to_bytes(data))

    @classmethod
    def adopt(cls, buf: bytearray) -> "SecretBuffer":
        """Take ownership of an existing bytearray without copying it."""
        obj = cls.__new__(cls)
        obj._buf = buf
        return obj

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __repr__(self) -> str:
        # never print contents
        return f"<SecretBuffer len={len(self._buf)}>"

    @property
    def raw(self) -> bytearray:
        return self._buf

    @property
    def wiped(self) -> bool:
        return not any(self._buf)

    def view(self) -> memoryview:
        return memoryview(self._buf)

    def decode(self, encoding: str = "utf-8") -> str:
        return self._buf.decode(encoding)

    def wipe(self) -> None:
        wipe(self._buf)


@contextmanager
def scoped_secret(data: BytesLike | str) -> Iterator[bytearray]:
    """Yield a bytearray copy of ``data`` and zero it when the block exits."""
    buf = bytearray(to_bytes(data))
    try:
        yield buf
    finally:
        wipe(buf)
