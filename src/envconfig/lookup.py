"""Lookup functions: where raw values come from.

A lookup is any callable ``key -> (raw_value, found)``.  The engine calls it
at most once per field per parse and never caches results between fields, so
a lookup may be backed by the process environment, a test double, or any
other key/value source.  Variable expansion, if wanted, is the lookup's job.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from typing import Union

LookupFunc = Callable[[str], tuple[str, bool]]

LookupLike = Union[LookupFunc, Mapping[str, str], None]


def environ_lookup(key: str) -> tuple[str, bool]:
    """Look up *key* in the process environment (``os.environ``)."""
    value = os.environ.get(key)
    if value is None:
        return "", False
    return value, True


def mapping_lookup(values: Mapping[str, str]) -> LookupFunc:
    """Return a lookup backed by a fixed mapping."""

    def lookup(key: str) -> tuple[str, bool]:
        if key in values:
            return values[key], True
        return "", False

    return lookup


def as_lookup(source: LookupLike) -> LookupFunc:
    """Normalise *source* into a :data:`LookupFunc`.

    ``None`` means the process environment; a mapping is wrapped with
    :func:`mapping_lookup`; a callable is returned unchanged.
    """
    if source is None:
        return environ_lookup
    if isinstance(source, Mapping):
        return mapping_lookup(source)
    if callable(source):
        return source
    raise TypeError(f"lookup must be a callable, a mapping, or None; got {type(source).__name__}")


__all__ = [
    "LookupFunc",
    "LookupLike",
    "environ_lookup",
    "mapping_lookup",
    "as_lookup",
]
