"""Hashable keys built from sequences of values."""

from __future__ import annotations

from typing import Any, Iterable, Tuple


def map_key(values: Iterable[Any]) -> Tuple[Any, ...]:
    """Return a hashable key that compares equal for equal value sequences."""
    return tuple(values)