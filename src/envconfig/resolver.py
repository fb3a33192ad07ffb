"""
Field resolvers: the per-field fallback algorithm run at parse time.

Each compiled field owns exactly one resolver.  A leaf resolver decides the
field's value in strict precedence order:

1. the looked-up value, if found and it parses (defaults are then ignored);
2. the literal ``default``, with a warning if a found value was invalid;
3. the sibling named by ``defaultFrom``, same warning rule, no re-parsing;
4. otherwise a fatal :class:`~envconfig.errors.NotSetError`, and the field
   is reset to its zero value.

A nested resolver hands the nested record to its own compiled parser with
the same lookup and passes the diagnostics through untouched.

Resolvers touch only their own attribute and call the lookup at most once.

Tags:
    envconfig, resolver, fallback, defaults
"""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from envconfig.errors import InternalDefectError, InvalidValueWarning, NotSetError
from envconfig.handlers import ParserFunc, TypeHandler
from envconfig.logging import get_logger
from envconfig.lookup import LookupFunc
from envconfig.outcome import ParseOutcome
from envconfig.tags import Tag

if TYPE_CHECKING:
    from envconfig.compiler import RecordParser

logger = get_logger(__name__)


class FieldResolver(Protocol):
    field_name: str

    def resolve(self, instance: Any, lookup: LookupFunc, outcome: ParseOutcome) -> None: ...


def type_name(tp: Any) -> str:
    """Readable name for a field type (``str``, ``list[str]``, ``AnyUrl``)."""
    if typing.get_origin(tp) is None and isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)


def matches_type(value: Any, tp: Any) -> bool:
    """True if *value* is exactly of type *tp* (no subclasses, no coercion).

    Parameterised ``list``/``set``/``frozenset``/``dict``/``tuple`` types
    are checked element-wise; unions match if any member matches.
    """
    origin = typing.get_origin(tp)
    if origin is None:
        return type(value) is tp
    args = typing.get_args(tp)
    if origin in (typing.Union, types.UnionType):
        return any(matches_type(value, arg) for arg in args)
    if type(value) is not origin:
        return False
    if origin in (list, set, frozenset) and len(args) == 1:
        return all(matches_type(item, args[0]) for item in value)
    if origin is dict and len(args) == 2:
        return all(matches_type(k, args[0]) and matches_type(v, args[1]) for k, v in value.items())
    if origin is tuple and args:
        if len(args) == 2 and args[1] is Ellipsis:
            return all(matches_type(item, args[0]) for item in value)
        return len(value) == len(args) and all(matches_type(v, a) for v, a in zip(value, args))
    return True


@dataclass(frozen=True)
class LeafResolver:
    """Resolves one field that has a type handler."""

    record_name: str
    field_name: str
    field_type: Any
    tag: Tag
    handler: TypeHandler
    parser_name: str

    @property
    def parser(self) -> ParserFunc:
        return self.handler.parsers[self.parser_name]

    def resolve(self, instance: Any, lookup: LookupFunc, outcome: ParseOutcome) -> None:
        key = self.tag.name
        found = False
        raw = ""
        value: Any = None
        error: Exception | None = None

        if key:
            raw, found = lookup(key)
            if found:
                try:
                    value = self.parser(raw)
                except (ValueError, TypeError) as exc:
                    error = exc

        default = self.tag.get("default")
        default_from = self.tag.get("defaultFrom")

        if found and error is None:
            pass  # a found, valid value always wins
        elif default is not None:
            if error is not None:
                outcome.warnings.append(self._invalid(raw, f"default {default!r}", error))
            try:
                value = self.parser(default)
            except (ValueError, TypeError) as exc:
                raise InternalDefectError(
                    f"record field {self.field_name!r}: default {default!r} was accepted at "
                    f"compile time but parser {self.parser_name!r} now rejects it",
                    cause=exc,
                ).with_context(record=self.record_name, field=self.field_name, key=key) from exc
            logger.debug("field_fallback", field=self.field_name, key=key, source="default", invalid=error is not None)
        elif default_from is not None:
            if error is not None:
                outcome.warnings.append(self._invalid(raw, f"defaultFrom {default_from!r}", error))
            value = getattr(instance, default_from)
            logger.debug("field_fallback", field=self.field_name, key=key, source="defaultFrom", invalid=error is not None)
        else:
            outcome.fatal.append(
                NotSetError(key, field=self.field_name, record=self.record_name, cause=error)
            )
            self.handler.setter(instance, self.field_name, self.handler.zero_value(self.field_type))
            return

        self._assign(instance, value)

    def _invalid(self, raw: str, fallback: str, error: Exception) -> InvalidValueWarning:
        return InvalidValueWarning(
            self.tag.name,
            raw,
            fallback,
            field=self.field_name,
            record=self.record_name,
            cause=error,
        )

    def _assign(self, instance: Any, value: Any) -> None:
        if value is None:
            # only a sibling holding a None zero value gets here
            value = self.handler.zero_value(self.field_type)
        elif not matches_type(value, self.field_type):
            raise InternalDefectError(
                f"type handler for {type_name(self.field_type)} returned "
                f"{type(value).__qualname__} from parser {self.parser_name!r}"
            ).with_context(record=self.record_name, field=self.field_name, key=self.tag.name)
        self.handler.setter(instance, self.field_name, value)


@dataclass(frozen=True)
class NestedResolver:
    """Resolves an untagged nested record field through its own parser."""

    field_name: str
    field_type: type
    parser: RecordParser

    def resolve(self, instance: Any, lookup: LookupFunc, outcome: ParseOutcome) -> None:
        child = getattr(instance, self.field_name, None)
        if child is None:
            child = self.field_type()
            setattr(instance, self.field_name, child)
        self.parser.check_instance(child)
        self.parser.run(child, lookup, outcome)


__all__ = [
    "FieldResolver",
    "LeafResolver",
    "NestedResolver",
    "matches_type",
    "type_name",
]
