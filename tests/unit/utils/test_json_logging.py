import json
import logging

from failure_model_engine.utils.logging import ContextFilter, JSONFormatter


def test_json_formatter_includes_context_and_extras() -> None:
    record = logging.LogRecord("fme.test", logging.WARNING, __file__, 1, "Discarding trial", None, None)
    record.batch = 2
    record.reason = "timeout"
    ContextFilter(run_id="run-1", component="normality").filter(record)

    payload = json.loads(JSONFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["message"] == "Discarding trial"
    assert payload["batch"] == 2
    assert payload["reason"] == "timeout"
    assert payload["run_id"] == "run-1"
    assert payload["component"] == "normality"
    assert "lineno" not in payload


def test_context_filter_keeps_explicit_component() -> None:
    record = logging.LogRecord("fme.test", logging.INFO, __file__, 1, "msg", None, None)
    record.component = "cli"
    ContextFilter(component="pipeline").filter(record)
    assert record.component == "cli"
