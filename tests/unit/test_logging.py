from __future__ import annotations

import json
import logging

from simpledb.utils.logging import _json_formatter, configure_logging, get_logger

EXPECTED_ROW = 3
EXPECTED_DIAGNOSTICS = 2


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.row = EXPECTED_ROW
    record.table = "persons"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["row"] == EXPECTED_ROW
    assert payload["table"] == "persons"


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"diagnostics": EXPECTED_DIAGNOSTICS}

    payload = json.loads(_json_formatter(record))

    assert payload["diagnostics"] == EXPECTED_DIAGNOSTICS


def test_json_formatter_stringifies_unserializable_values() -> None:
    record = _record()
    record.target = object

    payload = json.loads(_json_formatter(record))

    assert "object" in payload["target"]


def test_configure_logging_sets_root_level() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="WARNING", json_logs=True, force=True)
        assert root.level == logging.WARNING
        assert get_logger("simpledb.test").getEffectiveLevel() == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
