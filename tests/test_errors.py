"""Tests for envconfig.errors module."""

import pytest

from envconfig.errors import (
    CompileError,
    ConfigurationError,
    EnvConfigError,
    ErrorCategory,
    ErrorContext,
    FieldDiagnostic,
    InternalDefectError,
    InvalidDefaultError,
    InvalidValueWarning,
    NotSetError,
    TagSyntaxError,
    UnsupportedTypeError,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.record is None
        assert ctx.field is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(record="ServerConfig", key="PORT", metadata={"source": "env"})
        d = ctx.to_dict()
        assert d == {"record": "ServerConfig", "key": "PORT", "source": "env"}
        assert "field" not in d


class TestEnvConfigError:
    def test_default_category(self):
        assert EnvConfigError("boom").category is ErrorCategory.INTERNAL

    def test_explicit_category(self):
        err = EnvConfigError("boom", category=ErrorCategory.CONFIG)
        assert err.category is ErrorCategory.CONFIG

    def test_cause_is_chained(self):
        cause = ValueError("inner")
        err = EnvConfigError("outer", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_with_context_is_fluent(self):
        err = TagSyntaxError("bad").with_context(record="R", field="f", line=3)
        assert isinstance(err, TagSyntaxError)
        assert err.context.record == "R"
        assert err.context.field == "f"
        assert err.context.metadata == {"line": 3}

    def test_to_dict(self):
        err = InvalidDefaultError("bad default", cause=ValueError("nope")).with_context(field="port")
        d = err.to_dict()
        assert d["error_type"] == "InvalidDefaultError"
        assert d["message"] == "bad default"
        assert d["category"] == "SCHEMA"
        assert d["context"] == {"field": "port"}
        assert d["cause"] == "nope"

    def test_repr(self):
        assert repr(CompileError("x")) == "CompileError('x', category=SCHEMA)"


class TestHierarchy:
    @pytest.mark.parametrize("cls", [TagSyntaxError, UnsupportedTypeError, InvalidDefaultError])
    def test_compile_errors_are_schema(self, cls):
        err = cls("x")
        assert isinstance(err, CompileError)
        assert err.category is ErrorCategory.SCHEMA

    def test_diagnostics_are_config(self):
        assert NotSetError("X").category is ErrorCategory.CONFIG
        assert InvalidValueWarning("X", "v", "default '1'").category is ErrorCategory.CONFIG

    def test_internal_defect_is_not_a_diagnostic(self):
        assert not issubclass(InternalDefectError, FieldDiagnostic)
        assert InternalDefectError("x").category is ErrorCategory.INTERNAL


class TestDiagnostics:
    def test_not_set_message(self):
        err = NotSetError("LISTEN_PORT", field="port", record="ServerConfig")
        assert str(err) == "LISTEN_PORT is not set (aborting)"
        assert err.key == "LISTEN_PORT"
        assert err.context.to_dict() == {"record": "ServerConfig", "field": "port", "key": "LISTEN_PORT"}

    def test_not_set_const_field_uses_field_name(self):
        assert str(NotSetError("", field="mode")) == "mode is not set (aborting)"

    def test_not_set_with_cause(self):
        err = NotSetError("PORT", cause=ValueError("not an integer"))
        assert str(err) == "invalid PORT (aborting): not an integer"

    def test_invalid_value_message(self):
        err = InvalidValueWarning("PORT", "eighty", "default '80'", cause=ValueError("not an integer"))
        assert str(err) == "invalid PORT 'eighty' (falling back to default '80'): not an integer"
        assert err.value == "eighty"
        assert err.fallback == "default '80'"


class TestConfigurationError:
    def test_collects_errors(self):
        errors = [NotSetError("A"), NotSetError("B")]
        err = ConfigurationError(errors)
        assert err.errors == errors
        assert str(err) == "2 configuration error(s): A is not set (aborting); B is not set (aborting)"
        assert err.category is ErrorCategory.CONFIG
