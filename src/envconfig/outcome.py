"""Result of one parse: warnings and fatal errors, kept apart."""

from __future__ import annotations

from typing import Any, NamedTuple

from envconfig.errors import ConfigurationError, FieldDiagnostic
from envconfig.logging import get_logger


class ParseOutcome(NamedTuple):
    """Diagnostics collected while populating one record instance.

    Unpacks as a pair::

        warnings, fatal = parser.parse(cfg)

    Attributes:
        warnings: Fields whose value was invalid but a fallback was applied
        fatal: Fields with no usable value; each was reset to its zero value
    """

    warnings: list[FieldDiagnostic]
    fatal: list[FieldDiagnostic]

    @classmethod
    def empty(cls) -> ParseOutcome:
        return cls([], [])

    @property
    def ok(self) -> bool:
        return not self.fatal

    def raise_for_fatal(self) -> None:
        """Raise :class:`ConfigurationError` if any field could not be resolved."""
        if self.fatal:
            raise ConfigurationError(self.fatal)

    def log(self, logger: Any = None) -> None:
        """Emit every warning at ``warning`` level and every fatal error at ``error`` level."""
        logger = logger or get_logger(__name__)
        for diagnostic in self.warnings:
            logger.warning("config_warning", **diagnostic.to_dict())
        for diagnostic in self.fatal:
            logger.error("config_error", **diagnostic.to_dict())


__all__ = ["ParseOutcome"]
