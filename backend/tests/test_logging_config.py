"""Root logger setup."""
import json
import logging

from projecteye.logging_config import JsonFormatter, configure_logging


def test_configure_logging_is_idempotent():
    configure_logging("DEBUG")
    configure_logging("WARNING")
    root = logging.getLogger()
    ours = [h for h in root.handlers if h.get_name() == "projecteye"]
    assert len(ours) == 1
    assert root.level == logging.WARNING


def test_json_formatter():
    record = logging.LogRecord("projecteye.test", logging.INFO, __file__, 1, "milestone %s", ("m-1",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "projecteye.test"
    assert payload["message"] == "milestone m-1"
    assert "exception" not in payload
