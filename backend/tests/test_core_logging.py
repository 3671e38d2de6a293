"""
Tests for app/core/logging_config.py - Formatters and request id propagation.
"""
import json
import logging
import sys

from app.core.logging_config import (
    ColoredFormatter,
    JSONFormatter,
    RequestIdFilter,
    generate_request_id,
    request_id_var,
)


def _record(msg="Employee created", level=logging.INFO, **extra):
    record = logging.LogRecord("app.services.employee_service", level, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestIdFilter:

    def test_stamps_current_request_id(self):
        token = request_id_var.set("abcd1234")
        try:
            record = _record()
            RequestIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "abcd1234"

    def test_outside_a_request_id_is_none(self):
        record = _record()

        assert RequestIdFilter().filter(record) is True
        assert record.request_id is None


class TestJSONFormatter:

    def test_one_object_per_record(self):
        line = JSONFormatter("employee-api").format(_record(request_id="abcd1234"))

        entry = json.loads(line)
        assert entry["msg"] == "Employee created"
        assert entry["level"] == "INFO"
        assert entry["service"] == "employee-api"
        assert entry["request_id"] == "abcd1234"

    def test_extra_fields_are_grouped(self):
        entry = json.loads(JSONFormatter().format(_record(http_status=200)))

        assert entry["fields"] == {"http_status": 200}

    def test_exception_is_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        entry = json.loads(JSONFormatter().format(record))

        assert entry["error"]["type"] == "RuntimeError"
        assert entry["error"]["value"] == "boom"
        assert "RuntimeError: boom" in entry["error"]["trace"]


class TestColoredFormatter:

    def test_single_line_with_request_id(self):
        line = ColoredFormatter().format(_record(request_id="abcd1234"))

        assert "[abcd1234]" in line
        assert "Employee created" in line
        assert "\n" not in line


def test_request_ids_are_short_and_distinct():
    ids = {generate_request_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(len(i) == 8 for i in ids)
