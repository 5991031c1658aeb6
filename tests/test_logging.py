"""Structured logging: audit records, render-event hooks and @trace."""

import json
import logging
import threading

import pytest

from linkqr.logging import AUDIT, JsonFormatter, audit, events, get_logger, setup_logging, trace


@pytest.fixture(autouse=True)
def reset_linkqr_logger():
    root = logging.getLogger("linkqr")
    level, handlers = root.level, list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


def test_audit_level_is_registered():
    assert logging.getLevelName(AUDIT) == "AUDIT"
    assert logging.WARNING < AUDIT < logging.ERROR


def test_audit_record_carries_event_and_context(caplog):
    caplog.set_level(AUDIT, logger="linkqr")
    audit("qr.generated", logger=get_logger("test"), data="hi", length=3)

    record = caplog.records[-1]
    assert record.levelname == "AUDIT"
    assert record.name == "linkqr.test"
    assert record.event == "qr.generated"
    assert record.ctx == {"data": "hi", "length": 3}


def test_json_formatter_emits_one_object(caplog):
    caplog.set_level(AUDIT, logger="linkqr")
    audit("logo.missing", candidates=2)

    entry = json.loads(JsonFormatter().format(caplog.records[-1]))
    assert entry["event"] == "logo.missing"
    assert entry["level"] == "AUDIT"
    assert entry["ctx"] == {"candidates": 2}
    assert entry["ts"].endswith("Z")


def test_setup_logging_writes_json_file(tmp_path):
    log_file = tmp_path / "linkqr.log"
    setup_logging(level="AUDIT", log_file=str(log_file))
    audit("cli.start", command="generate")
    for handler in logging.getLogger("linkqr").handlers:
        handler.flush()

    lines = log_file.read_text().splitlines()
    assert json.loads(lines[-1])["event"] == "cli.start"


# ---------------------------------------------------------------------------
# Event hooks
# ---------------------------------------------------------------------------

def test_events_hook_receives_audits_even_when_logging_is_off():
    logging.getLogger("linkqr").setLevel(logging.ERROR)
    seen = []
    with events(lambda event, ctx: seen.append((event, ctx))):
        audit("qr.encoded", length=10)
    audit("qr.encoded", length=11)
    assert seen == [("qr.encoded", {"length": 10})]


def test_events_hook_is_per_thread():
    seen = {"main": [], "other": []}

    def worker():
        with events(lambda event, ctx: seen["other"].append(event)):
            audit("other.event")

    with events(lambda event, ctx: seen["main"].append(event)):
        t = threading.Thread(target=worker)
        t.start()
        t.join()
        audit("main.event")

    assert seen == {"main": ["main.event"], "other": ["other.event"]}


# ---------------------------------------------------------------------------
# @trace
# ---------------------------------------------------------------------------

@trace
def _double(x):
    return x * 2


@trace
def _explode():
    raise RuntimeError("boom")


def test_trace_logs_done_with_duration(caplog):
    caplog.set_level(logging.DEBUG, logger="linkqr")
    assert _double(21) == 42
    events_seen = [getattr(r, "event", None) for r in caplog.records]
    assert "_double.enter" in events_seen
    done = [r for r in caplog.records if getattr(r, "event", None) == "_double.done"][0]
    assert done.ctx == {"result": "42"}
    assert done.duration_ms >= 0


def test_trace_logs_and_reraises(caplog):
    caplog.set_level(logging.ERROR, logger="linkqr")
    with pytest.raises(RuntimeError, match="boom"):
        _explode()
    error = [r for r in caplog.records if getattr(r, "event", None) == "_explode.error"][0]
    assert error.exc_info[0] is RuntimeError
