"""Encoding of binary data as a hex string literal."""

from __future__ import annotations


class HexEncoder:
    """Writes bytes as ``'\\x<hex>'``, or ``NULL`` when nothing was written."""

    def __init__(self, prefix: bytes = b"") -> None:
        self._buf = bytearray(prefix)
        self._written = False

    def write(self, data: bytes) -> int:
        """Append ``data`` in hex form and return the number of bytes taken."""
        if not self._written:
            self._buf += b"'\\x"
            self._written = True
        self._buf += bytes(data).hex().encode("ascii")
        return len(data)

    def close(self) -> None:
        """Finish the literal."""
        if self._written:
            self._buf += b"'"
        else:
            self._buf += b"NULL"

    def getvalue(self) -> bytes:
        """Return everything encoded so far."""
        return bytes(self._buf)

    def __enter__(self) -> "HexEncoder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()