"""
Field tag grammar.

A tag is the string attached to a record field that says where its value
comes from and how to read it::

    NAME[,key=value]*

    "LISTEN_PORT,parser=int,default=8080"
    "ALLOWED_HOSTS,parser=comma-separated-list,default=localhost,127.0.0.1"

The first segment is the external key.  Every other segment is a
``key=value`` option.  Segments are split on commas with one exception: the
final ``default=`` option keeps the rest of the string verbatim, embedded
commas included, because defaults are frequently lists themselves.  The
escape is a single fixed rule; a default containing ``default=`` is not
escaped any further.

Which option keys are legal, which have implicit values, and how each value
is validated is decided by the caller through :class:`TagOption`.

Tags:
    envconfig, tag-grammar, parsing
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from envconfig.errors import TagSyntaxError

# Greedy head: the last ",default=" starts the literal default.
_TAG_DEFAULT_RX = re.compile(r"^(.+),\s*(default=.*)$")


@dataclass(frozen=True)
class Tag:
    """Parsed form of one field tag.

    Attributes:
        name: External lookup key (empty only for ``const`` fields)
        options: Option key to raw option value, explicit and implicit
    """

    name: str
    options: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def get(self, key: str) -> str | None:
        return self.options.get(key)

    def has(self, key: str) -> bool:
        return key in self.options


@dataclass(frozen=True)
class TagOption:
    """Specification of one legal tag option.

    Attributes:
        name: Option key
        default: Implicit raw value used when the option is not given
        validator: Called with the raw value; raises to reject it
    """

    name: str
    default: str | None = None
    validator: Callable[[str], None] = lambda _value: None


def _split_segments(raw: str) -> list[str]:
    match = _TAG_DEFAULT_RX.match(raw)
    if match is not None:
        return match.group(1).split(",") + [match.group(2)]
    return raw.split(",")


def parse_tag(raw: str, valid_options: Sequence[TagOption]) -> Tag:
    """Parse *raw* into a :class:`Tag`, validating it against *valid_options*.

    Raises:
        TagSyntaxError: on a segment that is not ``key=value``, an
            unrecognised or repeated option key, or a rejected option value.
    """
    parts = _split_segments(raw)
    specs = {spec.name: spec for spec in valid_options}

    name = parts[0].strip()
    options: dict[str, str] = {}
    for segment in parts[1:]:
        segment = segment.strip()
        key, sep, value = segment.partition("=")
        if not sep:
            raise TagSyntaxError(f"tag option is not a key=value pair: {segment!r}")
        if key not in specs:
            raise TagSyntaxError(f"tag option {key!r}: unrecognized")
        if key in options:
            raise TagSyntaxError(f"tag option {key!r}: is set multiple times")
        options[key] = value

    for spec in valid_options:
        if spec.name not in options:
            if spec.default is None:
                continue
            options[spec.name] = spec.default
        try:
            spec.validator(options[spec.name])
        except (ValueError, TypeError) as exc:
            raise TagSyntaxError(f"tag option {spec.name!r}: {exc}", cause=exc) from exc

    return Tag(name=name, options=options)


_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str) -> bool:
    """Strict boolean parsing shared by the ``const`` option and the ``bool`` parser."""
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean syntax: {value!r}")


__all__ = [
    "Tag",
    "TagOption",
    "parse_tag",
    "parse_bool",
]
