from __future__ import annotations

import savings_estimator.runtime_logging as runtime_logging


def test_runtime_logging_append_and_read(runtime_log_file):
    runtime_logging.append_runtime_event(
        level="warning",
        event="test_event",
        message="Test warning.",
        context={"case": "append_and_read"},
    )
    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 1
    assert events[0]["event"] == "test_event"
    assert events[0]["level"] == "WARNING"
    assert events[0]["context"]["case"] == "append_and_read"
    assert runtime_log_file.exists()


def test_recovered_errors_carry_exception_details(runtime_log_file):
    try:
        raise OSError("disk full")
    except OSError as exc:
        runtime_logging.log_recovered_error("snapshot_save_failed", "Could not persist.", exc, {"keys": ("a",)})

    event = runtime_logging.read_runtime_events(limit=1)[0]
    assert event["level"] == "WARNING"
    assert event["exception_type"] == "OSError"
    assert event["exception_message"] == "disk full"
    assert event["context"]["keys"] == ["a"]
    assert "Traceback" in event["traceback"]


def test_runtime_logging_handles_malformed_lines(runtime_log_file):
    runtime_log_file.parent.mkdir(parents=True, exist_ok=True)
    runtime_log_file.write_text(
        '{"event":"ok","level":"INFO","timestamp_utc":"2026-01-01T00:00:00+00:00","message":"ok","context":{}}\nnot-json\n',
        encoding="utf-8",
    )

    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 2
    assert events[0]["event"] == "ok"
    assert events[1]["event"] == "log_parse_error"


def test_configure_log_root_moves_log_file(tmp_path):
    runtime_logging.configure_log_root(tmp_path / "elsewhere")
    assert runtime_logging.RUNTIME_EVENTS_LOG_FILE == tmp_path / "elsewhere" / "runtime_events.jsonl"
    assert runtime_logging.read_runtime_events() == []
