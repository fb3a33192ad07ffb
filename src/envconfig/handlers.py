"""
Type handlers: the pluggable per-type parser sets.

A :class:`TypeHandler` teaches the engine one field type.  It maps parser
names (selected per field with ``parser=...``) to functions turning a raw
string into a value of exactly that type, and it knows how to write such a
value into a record and what the type's zero value is.

Parsers signal bad input by raising :class:`ValueError` or
:class:`TypeError`; anything else is treated as a bug and propagates.

Extending the registry::

    handlers = default_type_handlers()
    handlers[Decimal] = TypeHandler(parsers={"decimal": _parse_decimal})
    parser = compile_parser(BillingConfig, handlers)

If you add a parser to the defaults, add it to the smoke test in
``tests/test_handlers.py`` as well.

Tags:
    envconfig, type-handlers, registry, parsers
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from pydantic import AnyUrl, TypeAdapter

from envconfig.tags import parse_bool

ParserFunc = Callable[[str], Any]
SetterFunc = Callable[[Any, str, Any], None]


@dataclass(frozen=True)
class TypeHandler:
    """Parser set, setter and zero value for one field type.

    Attributes:
        parsers: Parser name to ``str -> value`` function
        setter: Writes a parsed value into ``(instance, attribute)``
        zero: Factory for the type's zero value; ``None`` means call the
            field type itself with no arguments
    """

    parsers: Mapping[str, ParserFunc]
    setter: SetterFunc = setattr
    zero: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parsers", MappingProxyType(dict(self.parsers)))

    def parser_names(self) -> list[str]:
        return sorted(self.parsers)

    def zero_value(self, field_type: Any) -> Any:
        if self.zero is not None:
            return self.zero()
        return field_type()


# =============================================================================
# PARSERS
# =============================================================================

_INT_RX = re.compile(r"[+-]?[0-9]+")


def _parse_int(value: str) -> int:
    if not _INT_RX.fullmatch(value):
        raise ValueError(f"invalid integer syntax: {value!r}")
    return int(value)


def _nonempty_string(value: str) -> str:
    if value == "":
        raise ValueError("is not set")
    return value


def _logging_level(value: str) -> str:
    if not isinstance(logging.getLevelName(value.upper()), int):
        raise ValueError(f"not a valid logging level: {value!r}")
    return value


def _integer_seconds(value: str) -> timedelta:
    seconds = _parse_int(value)
    try:
        return timedelta(seconds=seconds)
    except OverflowError as exc:
        raise ValueError(f"duration out of range: {value!r}") from exc


_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RX = re.compile(rf"[+-]?(?:{_DURATION_PART})+")
_DURATION_PART_RX = re.compile(_DURATION_PART)


def _duration(value: str) -> timedelta:
    """Parse a duration such as ``300ms``, ``-1.5h`` or ``2h45m``."""
    if value in ("0", "+0", "-0"):
        return timedelta(0)
    if not _DURATION_RX.fullmatch(value):
        raise ValueError(f"invalid duration: {value!r}")
    seconds = sum(float(num) * _DURATION_UNITS[unit] for num, unit in _DURATION_PART_RX.findall(value))
    if value.startswith("-"):
        seconds = -seconds
    try:
        return timedelta(seconds=seconds)
    except OverflowError as exc:
        raise ValueError(f"duration out of range: {value!r}") from exc


_URL_ADAPTER = TypeAdapter(AnyUrl)


def _absolute_url(value: str) -> AnyUrl:
    url = _URL_ADAPTER.validate_python(value)
    # "host:port" parses as an opaque URI with scheme "host"; we need a URL
    if not str(url).startswith(f"{url.scheme}://"):
        raise ValueError(f"not an absolute URL: {value!r}")
    return url


def _comma_separated_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _whitespace_separated_list(value: str) -> list[str]:
    return value.split()


_DEFAULT_HANDLERS: dict[Any, TypeHandler] = {
    str: TypeHandler(
        parsers={
            "nonempty-string": _nonempty_string,
            "possibly-empty-string": lambda value: value,
            "logging-level": _logging_level,
        },
    ),
    bool: TypeHandler(
        parsers={
            "empty/nonempty": lambda value: value != "",
            "bool": parse_bool,
        },
    ),
    int: TypeHandler(
        parsers={"int": _parse_int},
    ),
    float: TypeHandler(
        parsers={"float": float},
    ),
    timedelta: TypeHandler(
        parsers={
            "integer-seconds": _integer_seconds,
            "duration": _duration,
        },
    ),
    AnyUrl: TypeHandler(
        parsers={"absolute-URL": _absolute_url},
        zero=lambda: None,
    ),
    list[str]: TypeHandler(
        parsers={
            "comma-separated-list": _comma_separated_list,
            "whitespace-separated-list": _whitespace_separated_list,
        },
        zero=list,
    ),
}


def default_type_handlers() -> dict[Any, TypeHandler]:
    """Return a fresh copy of the default registry, safe to extend."""
    return dict(_DEFAULT_HANDLERS)


__all__ = [
    "ParserFunc",
    "SetterFunc",
    "TypeHandler",
    "default_type_handlers",
]
