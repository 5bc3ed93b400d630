"""A small cursor over text used to scan query templates."""

from __future__ import annotations

import string
from typing import Tuple, Union

_DIGITS = frozenset(string.digits)
_ALPHA = frozenset(string.ascii_letters)


class Parser:
    """Reads characters, identifiers and numbers from a string."""

    def __init__(self, data: Union[str, bytes]) -> None:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        self._s = data
        self._i = 0

    def valid(self) -> bool:
        """Return True while input remains."""
        return self._i < len(self._s)

    def remaining(self) -> str:
        """Return the unread part of the input."""
        return self._s[self._i:]

    def read(self) -> str:
        """Consume and return the next character, or "" at the end."""
        if self.valid():
            c = self._s[self._i]
            self._i += 1
            return c
        return ""

    def peek(self) -> str:
        """Return the next character without consuming it, or "" at the end."""
        return self._s[self._i] if self.valid() else ""

    def advance(self) -> None:
        """Skip one character."""
        self._i += 1

    def skip(self, char: str) -> bool:
        """Consume ``char`` if it is next."""
        if self.valid() and self.peek() == char:
            self.advance()
            return True
        return False

    def skip_bytes(self, data: str) -> bool:
        """Consume ``data`` if the input continues with it."""
        if self._s.startswith(data, self._i):
            self._i += len(data)
            return True
        return False

    def read_sep(self, sep: str) -> Tuple[str, bool]:
        """Read up to ``sep``, consuming it; the flag tells whether it was found."""
        index = self._s.find(sep, self._i)
        if index == -1:
            chunk = self._s[self._i:]
            self._i = len(self._s)
            return chunk, False
        chunk = self._s[self._i:index]
        self._i = index + len(sep)
        return chunk, True

    def read_identifier(self) -> Tuple[str, bool]:
        """Read a name or ``(expression)``; the flag is True for all-digit names."""
        if self.peek() == "(":
            close = self._s.find(")", self._i + 1)
            if close != -1:
                ident = self._s[self._i + 1:close]
                self._i = close + 1
                return ident, False

        rest = self._s[self._i:]
        end = len(rest)
        alpha = False
        for pos, c in enumerate(rest):
            if c in _DIGITS:
                continue
            if c in _ALPHA or (pos > 0 and alpha and c == "_"):
                alpha = True
                continue
            end = pos
            break
        if end == 0:
            return "", False
        self._i += end
        return rest[:end], not alpha

    def read_number(self) -> int:
        """Read a run of decimal digits, returning 0 if there is none."""
        rest = self._s[self._i:]
        end = len(rest)
        for pos, c in enumerate(rest):
            if c not in _DIGITS:
                end = pos
                break
        if end == 0:
            return 0
        self._i += end
        return int(rest[:end])