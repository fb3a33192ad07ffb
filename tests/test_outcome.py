"""Tests for envconfig.outcome: ParseOutcome helpers."""

import pytest
from structlog.testing import capture_logs

from envconfig.errors import ConfigurationError, InvalidValueWarning, NotSetError
from envconfig.outcome import ParseOutcome


class RecordingLogger:
    def __init__(self):
        self.events = []

    def warning(self, event, **kw):
        self.events.append(("warning", event, kw))

    def error(self, event, **kw):
        self.events.append(("error", event, kw))


@pytest.fixture
def mixed_outcome():
    return ParseOutcome(
        warnings=[InvalidValueWarning("PORT", "x", "default '80'", field="port")],
        fatal=[NotSetError("HOST", field="host")],
    )


class TestParseOutcome:
    def test_empty(self):
        outcome = ParseOutcome.empty()
        assert outcome.warnings == []
        assert outcome.fatal == []
        assert outcome.ok

    def test_empty_lists_are_not_shared(self):
        first = ParseOutcome.empty()
        first.fatal.append(NotSetError("X"))
        assert ParseOutcome.empty().fatal == []

    def test_unpacks_as_pair(self, mixed_outcome):
        warnings, fatal = mixed_outcome
        assert len(warnings) == 1
        assert len(fatal) == 1

    def test_warnings_alone_are_ok(self):
        outcome = ParseOutcome(warnings=[InvalidValueWarning("A", "", "default 'x'")], fatal=[])
        assert outcome.ok
        outcome.raise_for_fatal()

    def test_raise_for_fatal(self, mixed_outcome):
        assert not mixed_outcome.ok
        with pytest.raises(ConfigurationError) as excinfo:
            mixed_outcome.raise_for_fatal()
        assert excinfo.value.errors == mixed_outcome.fatal


class TestLog:
    def test_log_with_explicit_logger(self, mixed_outcome):
        logger = RecordingLogger()
        mixed_outcome.log(logger)
        assert [(level, event) for level, event, _ in logger.events] == [
            ("warning", "config_warning"),
            ("error", "config_error"),
        ]
        _, _, fields = logger.events[1]
        assert fields["error_type"] == "NotSetError"
        assert fields["context"]["key"] == "HOST"

    def test_log_with_default_logger(self, mixed_outcome):
        with capture_logs() as logs:
            mixed_outcome.log()
        assert [(e["log_level"], e["event"]) for e in logs] == [
            ("warning", "config_warning"),
            ("error", "config_error"),
        ]
