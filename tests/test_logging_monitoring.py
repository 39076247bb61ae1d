# tests/test_logging_monitoring.py
import io
import json
import logging

import pytest

from cie_core.logging_monitoring import LogLevel, configure_logging, get_extraction_logger


def test_levels():
    assert configure_logging().level == logging.WARNING
    assert configure_logging(verbose=True).level == logging.INFO
    assert configure_logging(debug=True).level == logging.DEBUG


def test_json_records_carry_sentence_ids():
    stream = io.StringIO()
    configure_logging(json_format=True, stream=stream)

    log = get_extraction_logger("cie.test")
    log.error("Detection failed", sentence_id="s3", context={"stage": "detect"})

    record = json.loads(stream.getvalue().splitlines()[-1])
    assert record["level"] == "ERROR"
    assert record["message"] == "Detection failed"
    assert record["sentence_id"] == "s3"
    assert record["context"] == {"stage": "detect"}


def test_console_format():
    stream = io.StringIO()
    configure_logging(stream=stream)
    logging.getLogger("cie.test").warning("Skipping line 4")
    assert "| WARNING  | cie.test | Skipping line 4" in stream.getvalue()


def test_timed_reports_duration():
    stream = io.StringIO()
    configure_logging(debug=True, json_format=True, stream=stream)

    log = get_extraction_logger("cie.test.timed")
    with log.timed("batch", LogLevel.DEBUG):
        pass
    records = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert [r["message"] for r in records] == ["Starting: batch", "Completed: batch"]
    assert "duration_ms" in records[1]

    with pytest.raises(ValueError):
        with log.timed("failing"):
            raise ValueError("boom")
    assert "Failed: failing - boom" in stream.getvalue()


def test_context_applies_only_inside_block():
    stream = io.StringIO()
    configure_logging(verbose=True, json_format=True, stream=stream)

    log = get_extraction_logger("cie.test.context")
    with log.context(command="extract"):
        log.info("inside", context={"batch": 1})
    log.warning("outside")

    inside, outside = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert inside["context"] == {"command": "extract", "batch": 1}
    assert inside["level"] == "INFO"
    assert "context" not in outside
    assert outside["level"] == "WARNING"


def test_debug_records_need_debug_level():
    stream = io.StringIO()
    configure_logging(verbose=True, stream=stream)
    log = get_extraction_logger("cie.test.debug")
    log.debug("hidden")
    log.info("shown")
    assert "hidden" not in stream.getvalue()
    assert "shown" in stream.getvalue()
