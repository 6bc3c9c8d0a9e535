"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys

from liftcoach.logging_config import ContextFilter, JSONFormatter, current_log_context, get_logger, log_context, setup_logging


def _record(msg="hello %s", args=("world",), exc_info=None, level=logging.INFO):
    return logging.LogRecord(
        name="test", level=level, pathname="test.py",
        lineno=1, msg=msg, args=args, exc_info=exc_info
    )


def test_json_formatter_outputs_valid_json():
    parsed = json.loads(JSONFormatter().format(_record()))
    assert parsed["message"] == "hello world"
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "test"
    assert "timestamp" in parsed
    assert "context" not in parsed


def test_json_formatter_groups_context_fields():
    record = _record()
    record.ctx_exercise = "Barbell Squat"
    record.ctx_fix_type = "deload"
    parsed = json.loads(JSONFormatter().format(record))
    assert parsed["context"] == {"exercise": "Barbell Squat", "fix_type": "deload"}


def test_json_formatter_includes_exception():
    try:
        raise ValueError("test error")
    except ValueError:
        exc_info = sys.exc_info()
    parsed = json.loads(JSONFormatter().format(_record(msg="fail", args=(), exc_info=exc_info, level=logging.ERROR)))
    assert parsed["exception"]["type"] == "ValueError"
    assert parsed["exception"]["message"] == "test error"


def test_get_logger_returns_named_logger():
    log = get_logger("liftcoach.services.stall")
    assert log.name == "liftcoach.services.stall"
    assert isinstance(log, logging.Logger)


def test_setup_logging_idempotent():
    root = logging.getLogger()
    initial_count = len(root.handlers)
    setup_logging()
    setup_logging()
    # Should not add duplicate handlers
    assert len(root.handlers) <= initial_count + 1


def test_setup_logging_attaches_one_context_filter():
    setup_logging()
    setup_logging()
    for handler in logging.getLogger().handlers:
        assert sum(isinstance(f, ContextFilter) for f in handler.filters) == 1


# --- log_context ---

def test_log_context_stamps_records():
    record = _record()
    with log_context(template="Lower A", exercise="Barbell Squat"):
        ContextFilter().filter(record)
    parsed = json.loads(JSONFormatter().format(record))
    assert parsed["context"] == {"exercise": "Barbell Squat", "template": "Lower A"}


def test_log_context_nests_and_restores():
    with log_context(template="Lower A"):
        with log_context(exercise="Barbell Squat"):
            assert current_log_context() == {"template": "Lower A", "exercise": "Barbell Squat"}
        assert current_log_context() == {"template": "Lower A"}
    assert current_log_context() == {}


def test_log_context_skips_none_values():
    with log_context(template="Lower A", week_type=None):
        assert current_log_context() == {"template": "Lower A"}


def test_explicit_extra_beats_bound_context():
    record = _record()
    record.ctx_exercise = "Push-ups"
    with log_context(exercise="Bench Press"):
        ContextFilter().filter(record)
    assert record.ctx_exercise == "Push-ups"
