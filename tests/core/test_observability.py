"""Structured Logging — JSON formatter surfaces domain extras; setup is idempotent."""

import json
import logging
from uuid import uuid4

from goingout.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "goingout.services.plan_ledger", logging.INFO, __file__, 1,
        "Plan set", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_base_fields_present():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "goingout.services.plan_ledger"
    assert log["message"] == "Plan set"
    assert "timestamp" in log


def test_uuid_extras_are_stringified():
    uid = uuid4()
    log = json.loads(JSONFormatter().format(_record(user_id=uid, scope="athens-ga")))
    assert log["user_id"] == str(uid)
    assert log["scope"] == "athens-ga"


def test_numeric_extras_kept_as_numbers():
    log = json.loads(JSONFormatter().format(_record(attempt=2)))
    assert log["attempt"] == 2


def test_unknown_extras_are_ignored():
    log = json.loads(JSONFormatter().format(_record(password="x")))
    assert "password" not in log


def test_setup_logging_twice_keeps_one_handler():
    root = logging.getLogger()
    level, before = root.level, list(root.handlers)
    try:
        setup_logging("DEBUG", "json")
        handler = setup_logging("INFO", "text")
        ours = [h for h in root.handlers if h.get_name() == handler.get_name()]
        assert ours == [handler]
        assert root.level == logging.INFO
        assert not isinstance(handler.formatter, JSONFormatter)
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
        root.setLevel(level)
