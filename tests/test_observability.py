import io
import json
import logging

import pytest

from sdkfoundry.observability import TelemetrySink, log_performance, setup_logging
from sdkfoundry.observability.telemetry import MAX_PARAM_LENGTH, TRUNCATION_SUFFIX, sanitize_params


def test_setup_logging_writes_to_given_stream():
    """The stdio server sends logs to stderr; any stream can be passed."""
    stream = io.StringIO()
    setup_logging(level="INFO", stream=stream, use_colors=False)

    logging.getLogger("sdkfoundry.test").info("hello stream")

    assert "hello stream" in stream.getvalue()
    assert "INFO" in stream.getvalue()


def test_setup_logging_json_format():
    stream = io.StringIO()
    setup_logging(level="DEBUG", service_name="sdkfoundry-test", use_json=True, stream=stream)

    logging.getLogger("sdkfoundry.test").warning("structured", extra={"stage": "scan"})

    entry = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert entry["message"] == "structured"
    assert entry["level"] == "WARNING"
    assert entry["service"] == "sdkfoundry-test"
    assert entry["stage"] == "scan"


def test_setup_logging_file_is_json(tmp_path):
    log_file = tmp_path / "logs" / "sdkfoundry.log"
    setup_logging(level="INFO", log_file=str(log_file), stream=io.StringIO())

    logging.getLogger("sdkfoundry.test").info("to file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = log_file.read_text().strip().splitlines()
    assert json.loads(lines[-1])["message"] == "to file"


def test_log_performance_reraises_and_logs(caplog):
    @log_performance(logger_name="sdkfoundry.perf", threshold_ms=1000.0)
    def failing_stage():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="sdkfoundry.perf"):
        with pytest.raises(RuntimeError):
            failing_stage()

    assert "Stage failed: failing_stage" in caplog.text


def test_log_performance_warns_on_slow_stage(caplog):
    @log_performance(logger_name="sdkfoundry.perf", threshold_ms=-1.0)
    def stage():
        return 42

    with caplog.at_level(logging.WARNING, logger="sdkfoundry.perf"):
        assert stage() == 42

    assert "Slow stage: stage" in caplog.text


def test_sanitize_params_truncates_long_strings():
    params = {"code": "x" * (MAX_PARAM_LENGTH + 20), "feature": "grab", "count": 3}

    sanitized = sanitize_params(params)

    assert sanitized["code"] == "x" * MAX_PARAM_LENGTH + TRUNCATION_SUFFIX
    assert sanitized["feature"] == "grab"
    assert sanitized["count"] == 3
    assert sanitize_params(None) == {}


def test_telemetry_appends_json_lines(tmp_path):
    path = tmp_path / "nested" / "telemetry.jsonl"
    sink = TelemetrySink(path)

    assert sink.record("get_component_schema", {"componentName": "Interactable"})
    assert sink.record("validate_code")

    events = [json.loads(line) for line in path.read_text().splitlines()]
    assert [e["tool"] for e in events] == ["get_component_schema", "validate_code"]
    assert events[0]["params"] == {"componentName": "Interactable"}
    assert events[1]["params"] == {}
    assert "timestamp" in events[0]


def test_telemetry_disabled_writes_nothing(tmp_path):
    path = tmp_path / "telemetry.jsonl"
    assert TelemetrySink(path, enabled=False).record("validate_code", {}) is False
    assert not path.exists()


def test_telemetry_failure_is_not_raised(tmp_path, caplog):
    """A directory in place of the file makes the write fail; the call still returns."""
    path = tmp_path / "telemetry.jsonl"
    path.mkdir()

    with caplog.at_level(logging.WARNING):
        assert TelemetrySink(path).record("validate_code", {"code": "x"}) is False

    assert "Telemetry logging failed" in caplog.text
