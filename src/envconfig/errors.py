"""
Structured error types for envconfig.

Manifesto:
    A configuration loader has three very different kinds of failure and a
    caller must be able to tell them apart without parsing messages:

    - **Schema errors:** the record type or one of its tags is wrong.  Raised
      once, at compile time, and never at parse time.
    - **Configuration diagnostics:** the environment is wrong.  Collected as
      warnings (a fallback was applied) or fatal errors (no value at all),
      never raised by ``RecordParser.parse``.
    - **Internal defects:** a type handler broke its contract.  Raised
      immediately; these are bugs, not bad input.

Architecture:
    ::

        EnvConfigError  (category, context, cause)
        ├── CompileError            (SCHEMA)
        │   ├── TagSyntaxError
        │   ├── UnsupportedTypeError
        │   └── InvalidDefaultError
        ├── FieldDiagnostic         (CONFIG)
        │   ├── InvalidValueWarning   -> ParseOutcome.warnings
        │   └── NotSetError           -> ParseOutcome.fatal
        ├── ConfigurationError      (CONFIG)  raise_for_fatal()
        └── InternalDefectError     (INTERNAL)

Examples:
    >>> err = NotSetError("LISTEN_PORT", field="port", record="ServerConfig")
    >>> err.key
    'LISTEN_PORT'
    >>> err.to_dict()["category"]
    'CONFIG'

Tags:
    error-handling, exception-hierarchy, error-context, envconfig

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used to route envconfig failures."""

    SCHEMA = "SCHEMA"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an :class:`EnvConfigError`.

    Attributes:
        record: Name of the record type being compiled or parsed
        field: Name of the record field involved
        key: External lookup key (environment variable name)
        metadata: Additional key-value pairs
    """

    record: str | None = None
    field: str | None = None
    key: str | None = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["record", "field", "key"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class EnvConfigError(Exception):
    """
    Base exception for all envconfig errors.

    Every instance carries a :class:`ErrorCategory`, an :class:`ErrorContext`
    and an optional chained cause.  Subclasses set ``default_category``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> EnvConfigError:
        """
        Add context to this error (fluent API).

        Usage:
            raise TagSyntaxError("bad option").with_context(field="port")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# COMPILE-TIME (SCHEMA) ERRORS
# =============================================================================


class CompileError(EnvConfigError):
    """
    A record type could not be compiled into a parser.

    Terminal: no parser is produced and nothing may be parsed with a
    partially compiled schema.
    """

    default_category = ErrorCategory.SCHEMA


class TagSyntaxError(CompileError):
    """A field tag is malformed, has an unknown/duplicate option, or an option value is rejected."""


class UnsupportedTypeError(CompileError):
    """A field type has no type handler and is not a nested record."""


class InvalidDefaultError(CompileError):
    """A literal ``default=`` value does not parse with the selected parser."""


# =============================================================================
# INVOCATION-TIME DIAGNOSTICS
# =============================================================================


class FieldDiagnostic(EnvConfigError):
    """Base class for diagnostics collected while parsing a record."""

    default_category = ErrorCategory.CONFIG

    def __init__(
        self,
        key: str,
        message: str,
        *,
        field: str | None = None,
        record: str | None = None,
        cause: BaseException | None = None,
    ):
        self.key = key
        super().__init__(
            message,
            context=ErrorContext(record=record, field=field, key=key),
            cause=cause,
        )


class InvalidValueWarning(FieldDiagnostic):
    """The looked-up value was invalid; a fallback was applied instead."""

    def __init__(
        self,
        key: str,
        value: str,
        fallback: str,
        *,
        field: str | None = None,
        record: str | None = None,
        cause: BaseException | None = None,
    ):
        self.value = value
        self.fallback = fallback
        message = f"invalid {key} {value!r} (falling back to {fallback})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(key, message, field=field, record=record, cause=cause)


class NotSetError(FieldDiagnostic):
    """No usable value could be determined for a field."""

    def __init__(
        self,
        key: str,
        *,
        field: str | None = None,
        record: str | None = None,
        cause: BaseException | None = None,
    ):
        if cause is not None:
            message = f"invalid {key} (aborting): {cause}"
        else:
            message = f"{key or field} is not set (aborting)"
        super().__init__(key, message, field=field, record=record, cause=cause)


class ConfigurationError(EnvConfigError):
    """One or more fields could not be resolved.  Raised by ``raise_for_fatal``."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, errors: list[FieldDiagnostic]):
        self.errors = list(errors)
        lines = "; ".join(str(e) for e in self.errors)
        super().__init__(f"{len(self.errors)} configuration error(s): {lines}")


# =============================================================================
# INTERNAL DEFECTS
# =============================================================================


class InternalDefectError(EnvConfigError):
    """
    A type handler or the engine itself violated its contract.

    Never collected as a diagnostic: these indicate the registry is broken,
    not that the input is bad.
    """

    default_category = ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "EnvConfigError",
    # Compile time
    "CompileError",
    "TagSyntaxError",
    "UnsupportedTypeError",
    "InvalidDefaultError",
    # Parse time
    "FieldDiagnostic",
    "InvalidValueWarning",
    "NotSetError",
    "ConfigurationError",
    # Defects
    "InternalDefectError",
]
