"""
Schema compiler: record type in, reusable parser out.

Manifesto:
    Everything that can be checked without looking at the environment is
    checked once, at compile time: tag grammar, parser names, conflicting
    options, literal defaults, ``defaultFrom`` references and their types,
    nested record shapes.  A compiled :class:`RecordParser` can then only
    fail because of bad input, and it reports bad input as diagnostics
    instead of exceptions.

Architecture:
    ::

        compile_parser(ServerConfig, handlers)
            │
            ├── describe_record()        RecordType (ordered FieldSpecs)
            │
            ├── for each field, left to right
            │     has handler?   ──►  parse_tag() + checks ──► LeafResolver
            │     dataclass?     ──►  compile_parser()     ──► NestedResolver
            │     otherwise      ──►  UnsupportedTypeError
            │     seen[name] = type   (for later defaultFrom checks)
            │
            └── RecordParser(record_type, resolvers)

        parser.parse(cfg, lookup)  ──► ParseOutcome(warnings, fatal)

Examples:
    >>> @dataclass
    ... class ServerConfig:
    ...     port: int = env_field("PORT,parser=int,default=8080")
    >>> parser = compile_parser(ServerConfig)
    >>> cfg = ServerConfig()
    >>> warnings, fatal = parser.parse(cfg, {"PORT": "9000"})
    >>> cfg.port
    9000

Guardrails:
    ❌ DON'T: Recompile a record type for every parse
    ✅ DO: Compile once at startup (or use ``parser_for``) and reuse

    ❌ DON'T: Parse the same instance from two threads at once
    ✅ DO: Share one parser across threads, one instance per parse

Tags:
    envconfig, compiler, schema, parser, defaults

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from envconfig.errors import (
    CompileError,
    InvalidDefaultError,
    TagSyntaxError,
    UnsupportedTypeError,
)
from envconfig.handlers import TypeHandler, default_type_handlers
from envconfig.logging import LogContext, get_logger
from envconfig.lookup import LookupFunc, LookupLike, as_lookup
from envconfig.outcome import ParseOutcome
from envconfig.resolver import FieldResolver, LeafResolver, NestedResolver, type_name
from envconfig.schema import FieldSpec, RecordType, describe_record, is_record_type
from envconfig.tags import TagOption, parse_bool, parse_tag

logger = get_logger(__name__)

TypeHandlers = Mapping[Any, TypeHandler]


@dataclass(frozen=True)
class RecordParser:
    """Compiled parser bound to exactly one record type.

    Immutable; safe to share between threads as long as each parse works
    on its own record instance.
    """

    record_type: RecordType
    resolvers: tuple[FieldResolver, ...]

    @property
    def record_class(self) -> type:
        return self.record_type.cls

    @property
    def field_names(self) -> list[str]:
        return [resolver.field_name for resolver in self.resolvers]

    def check_instance(self, instance: Any) -> None:
        if type(instance) is not self.record_type.cls:
            raise TypeError(
                f"wrong type ({type(instance).__qualname__}) for parser ({self.record_type.name})"
            )

    def parse(self, instance: Any, lookup: LookupLike = None) -> ParseOutcome:
        """Populate *instance* from *lookup* and report what went wrong.

        Every field is processed, in declaration order, whatever happened to
        the fields before it.

        Args:
            instance: Record to populate; must be exactly of ``record_class``
            lookup: ``key -> (raw, found)`` callable, a mapping, or ``None``
                for the process environment

        Returns:
            ParseOutcome with the warnings and fatal errors of all fields

        Raises:
            TypeError: if *instance* is not of this parser's record type
            InternalDefectError: if a type handler breaks its contract
        """
        self.check_instance(instance)
        outcome = ParseOutcome.empty()
        with LogContext(record=self.record_type.name):
            self.run(instance, as_lookup(lookup), outcome)
        return outcome

    def parse_new(self, lookup: LookupLike = None) -> tuple[Any, ParseOutcome]:
        """Instantiate the record with no arguments and parse into it.

        Every field of the record must be constructible without arguments:
        ``env_field`` takes care of leaf fields, nested record fields need
        ``field(default_factory=...)``.  Otherwise build the instance yourself
        and call :meth:`parse`.

        Raises:
            TypeError: if the record class cannot be instantiated without
                arguments
        """
        try:
            instance = self.record_type.cls()
        except TypeError as exc:
            raise TypeError(
                f"record {self.record_type.name} cannot be instantiated without arguments "
                f"(give nested record fields a default_factory, or build the instance "
                f"and call parse()): {exc}"
            ) from exc
        return instance, self.parse(instance, lookup)

    def run(self, instance: Any, lookup: LookupFunc, outcome: ParseOutcome) -> None:
        for resolver in self.resolvers:
            resolver.resolve(instance, lookup, outcome)


def compile_parser(
    record: RecordType | type,
    handlers: TypeHandlers | None = None,
) -> RecordParser:
    """Compile *record* (a dataclass type or a :class:`RecordType`) into a parser.

    Args:
        record: Record type to compile
        handlers: Type to :class:`TypeHandler` registry; defaults to
            :func:`~envconfig.handlers.default_type_handlers`

    Raises:
        CompileError: if any field or tag is invalid; nothing is returned
    """
    if handlers is None:
        handlers = default_type_handlers()
    return _compile(record, handlers, ())


def _compile(record: RecordType | type, handlers: TypeHandlers, stack: tuple[type, ...]) -> RecordParser:
    record_type = record if isinstance(record, RecordType) else describe_record(record)
    if record_type.cls in stack:
        raise UnsupportedTypeError(f"record {record_type.name} contains itself")
    stack = stack + (record_type.cls,)

    resolvers: list[FieldResolver] = []
    seen: dict[str, Any] = {}
    for spec in record_type.fields:
        if spec.name in seen:
            raise _field_error(CompileError, record_type, spec, "is declared more than once")
        handler = handlers.get(spec.type)
        if handler is None:
            resolvers.append(_compile_nested(record_type, spec, handlers, stack))
        else:
            resolvers.append(_compile_leaf(record_type, spec, handler, seen))
        seen[spec.name] = spec.type

    logger.debug("record_compiled", record=record_type.name, fields=len(resolvers))
    return RecordParser(record_type=record_type, resolvers=tuple(resolvers))


def _field_error(
    error_cls: type[CompileError],
    record_type: RecordType,
    spec: FieldSpec,
    message: str,
    cause: Exception | None = None,
) -> CompileError:
    error = error_cls(f"record field {spec.name!r}: {message}", cause=cause)
    error.with_context(record=record_type.name, field=spec.name)
    return error


def _compile_nested(
    record_type: RecordType,
    spec: FieldSpec,
    handlers: TypeHandlers,
    stack: tuple[type, ...],
) -> NestedResolver:
    if not is_record_type(spec.type):
        raise _field_error(UnsupportedTypeError, record_type, spec, f"unsupported type {type_name(spec.type)}")
    if spec.tag:
        raise _field_error(
            UnsupportedTypeError,
            record_type,
            spec,
            f"unsupported type {type_name(spec.type)}; cannot have tag on nested record",
        )
    try:
        sub_parser = _compile(spec.type, handlers, stack)
    except CompileError as exc:
        raise _field_error(type(exc), record_type, spec, exc.message, cause=exc) from exc
    return NestedResolver(field_name=spec.name, field_type=spec.type, parser=sub_parser)


def _leaf_options(spec: FieldSpec, handler: TypeHandler, seen: Mapping[str, Any]) -> list[TagOption]:
    def validate_default_from(name: str) -> None:
        if name not in seen:
            raise ValueError(f"referenced field {name!r} does not exist (yet?)")
        if seen[name] != spec.type:
            raise ValueError(
                f"referenced field {name!r} is of type {type_name(seen[name])}, "
                f"but we need type {type_name(spec.type)}"
            )

    def validate_parser(name: str) -> None:
        if name not in handler.parsers:
            raise ValueError(f"value {name!r} is not one of {handler.parser_names()}")

    return [
        TagOption("const", default="false", validator=parse_bool),
        TagOption("default"),
        TagOption("defaultFrom", validator=validate_default_from),
        TagOption("parser", validator=validate_parser),
    ]


def _compile_leaf(
    record_type: RecordType,
    spec: FieldSpec,
    handler: TypeHandler,
    seen: Mapping[str, Any],
) -> LeafResolver:
    try:
        tag = parse_tag(spec.tag, _leaf_options(spec, handler, seen))
    except TagSyntaxError as exc:
        raise _field_error(TagSyntaxError, record_type, spec, exc.message, cause=exc) from exc

    is_const = parse_bool(tag.options["const"])
    if tag.name == "" and not is_const:
        raise _field_error(
            TagSyntaxError, record_type, spec, "does not have an environment variable name (and const=false)"
        )
    if tag.name != "" and is_const:
        raise _field_error(
            TagSyntaxError, record_type, spec, f"has an environment variable name {tag.name!r} (and const=true)"
        )

    parser_name = tag.get("parser")
    if parser_name is None:
        raise _field_error(
            TagSyntaxError,
            record_type,
            spec,
            f'type {type_name(spec.type)} requires a "parser" setting '
            f"(valid parsers are {handler.parser_names()})",
        )

    default = tag.get("default")
    if default is not None and tag.has("defaultFrom"):
        raise _field_error(TagSyntaxError, record_type, spec, "has both default and defaultFrom")
    if default is not None:
        try:
            handler.parsers[parser_name](default)
        except (ValueError, TypeError) as exc:
            raise _field_error(
                InvalidDefaultError, record_type, spec, f"invalid default {default!r}: {exc}", cause=exc
            ) from exc

    return LeafResolver(
        record_name=record_type.name,
        field_name=spec.name,
        field_type=spec.type,
        tag=tag,
        handler=handler,
        parser_name=parser_name,
    )


# ── Cached parsers for the default registry ──────────────────────────────

_parser_cache: dict[type, RecordParser] = {}
_parser_cache_lock = threading.Lock()


def parser_for(cls: type) -> RecordParser:
    """Return the parser for *cls* compiled against the default registry, cached."""
    with _parser_cache_lock:
        parser = _parser_cache.get(cls)
        if parser is None:
            logger.debug("parser_cache_miss", record=cls.__qualname__)
            parser = compile_parser(cls)
            _parser_cache[cls] = parser
        return parser


def clear_parser_cache() -> None:
    """Drop all cached parsers (for testing)."""
    with _parser_cache_lock:
        _parser_cache.clear()


__all__ = [
    "RecordParser",
    "TypeHandlers",
    "compile_parser",
    "parser_for",
    "clear_parser_cache",
]
