# src/georegistry/tests/test_logging/test_formatters.py
import json
import sys
import logging

from georegistry.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record():
    return logging.LogRecord("georegistry", logging.INFO, __file__, 10, "hello %s", ("tester",), None)


def test_json_formatter_basic_fields():
    rec = make_record()
    rec.country_id = 7
    rec.request_id = "req-1"

    data = json.loads(JsonFormatter(env="testing", service="svc").format(rec))

    assert data["message"] == "hello tester"
    assert data["level"] == "INFO"
    assert data["logger"] == "georegistry"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert data["request_id"] == "req-1"
    assert data["country_id"] == 7
    assert "timestamp" in data
    assert "version" in data


def test_json_formatter_non_serializable_extra():
    rec = make_record()

    class X:
        def __repr__(self):
            return "<X>"

    rec.obj = X()
    data = json.loads(JsonFormatter(env="dev", service="svc").format(rec))
    assert isinstance(data["obj"], str)


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        exc_info = sys.exc_info()

    rec = logging.LogRecord("georegistry", logging.ERROR, __file__, 10, "failed", (), exc_info)
    data = json.loads(JsonFormatter(env="dev").format(rec))
    assert "ValueError: boom" in data["exc_info"]
    assert data["service"] == "geo-registry"


def test_color_formatter_line_layout():
    rec = make_record()
    rec.request_id = "rid-9"
    line = ColorFormatter().format(rec)
    assert "INFO" in line
    assert "rid-9" in line
    assert line.endswith("hello tester")
