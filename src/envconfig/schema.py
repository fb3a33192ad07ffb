"""Record type descriptions.

The compiler never inspects classes directly; it works on a
:class:`RecordType`, an immutable ordered list of ``(name, type, tag)``
field descriptors.  :func:`describe_record` builds one from a dataclass,
reading each field's tag from its metadata::

    @dataclass
    class ServerConfig:
        host: str = env_field("HOST,parser=nonempty-string,default=0.0.0.0")
        port: int = env_field("PORT,parser=int,default=8080")
        tls: TLSConfig = field(default_factory=TLSConfig)   # nested record
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from typing import Any

from envconfig.errors import UnsupportedTypeError

# Dataclass field metadata key holding the tag string
ENV_TAG_KEY = "env"


@dataclass(frozen=True)
class FieldSpec:
    """One field of a record: its attribute name, declared type and raw tag."""

    name: str
    type: Any
    tag: str = ""


@dataclass(frozen=True)
class RecordType:
    """Immutable, ordered description of one record type."""

    cls: type
    fields: tuple[FieldSpec, ...]

    @property
    def name(self) -> str:
        return self.cls.__qualname__

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


def is_record_type(tp: Any) -> bool:
    """Return True if *tp* is a class that can be described as a record."""
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _describe(obj: Any) -> str:
    if isinstance(obj, type):
        return repr(obj)
    # never call repr() on an arbitrary instance here
    return f"instance of {type(obj).__qualname__}"


def describe_record(cls: type) -> RecordType:
    """Build the :class:`RecordType` for dataclass *cls*.

    Field types come from :func:`typing.get_type_hints`, so string
    annotations are resolved against the class's module.

    Raises:
        UnsupportedTypeError: if *cls* is not a dataclass type or its
            annotations cannot be resolved.
    """
    if not is_record_type(cls):
        raise UnsupportedTypeError(
            f"{_describe(cls)} does not describe a record type (expected a dataclass type)"
        )
    try:
        hints = typing.get_type_hints(cls)
    except NameError as exc:
        raise UnsupportedTypeError(
            f"record {cls.__qualname__}: cannot resolve field annotations: {exc}", cause=exc
        ) from exc

    fields = tuple(
        FieldSpec(
            name=f.name,
            type=hints.get(f.name, f.type),
            tag=f.metadata.get(ENV_TAG_KEY, ""),
        )
        for f in dataclasses.fields(cls)
    )
    return RecordType(cls=cls, fields=fields)


def env_field(tag: str, **kwargs: Any) -> Any:
    """Declare a dataclass field populated from the environment.

    Extra keyword arguments go to :func:`dataclasses.field`.  Without a
    ``default``/``default_factory`` the field is left out of ``__init__`` and
    holds ``None`` until a parser fills it in, so the record can be
    instantiated empty (and still compared and printed).
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[ENV_TAG_KEY] = tag
    if "default" not in kwargs and "default_factory" not in kwargs:
        kwargs["default"] = None
        kwargs.setdefault("init", False)
    return dataclasses.field(metadata=metadata, **kwargs)


__all__ = [
    "ENV_TAG_KEY",
    "FieldSpec",
    "RecordType",
    "describe_record",
    "env_field",
    "is_record_type",
]
