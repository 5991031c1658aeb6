"""linkqr structured logging: audit events, render-event hooks and call tracing."""

import contextlib
import contextvars
import functools
import json
import logging
import sys
import time
import traceback
from datetime import datetime, timezone
from typing import Callable

# Custom AUDIT level (between WARNING=30 and ERROR=40)
AUDIT = 35
logging.addLevelName(AUDIT, "AUDIT")

EventCallback = Callable[[str, dict], None]

_event_hook: contextvars.ContextVar[EventCallback | None] = contextvars.ContextVar(
    "linkqr_event_hook", default=None
)


def _truncate(value: object, max_len: int = 80) -> str:
    """Truncate a string for safe logging."""
    s = str(value)
    if len(s) > max_len:
        return s[:max_len] + "..."
    return s


def _utc(record: logging.LogRecord, fmt: str) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(fmt)[:-3]


class JsonFormatter(logging.Formatter):
    """Outputs one JSON object per line for machine parsing."""

    def format(self, record):
        entry = {
            "ts": _utc(record, "%Y-%m-%dT%H:%M:%S.%f") + "Z",
            "level": record.levelname,
            "src": record.name,
        }
        if hasattr(record, "event"):
            entry["event"] = record.event
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = round(record.duration_ms, 2)
        if hasattr(record, "ctx"):
            entry["ctx"] = record.ctx
        if record.getMessage() and not hasattr(record, "event"):
            entry["msg"] = record.getMessage()
        if record.exc_info and record.exc_info[1]:
            entry["traceback"] = traceback.format_exception(*record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable colored console output."""

    COLORS = {
        "DEBUG": "\033[36m",    # cyan
        "INFO": "\033[32m",     # green
        "AUDIT": "\033[35m",    # magenta
        "WARNING": "\033[33m",  # yellow
        "ERROR": "\033[31m",    # red
    }
    RESET = "\033[0m"

    def format(self, record):
        ts = _utc(record, "%H:%M:%S.%f")
        color = self.COLORS.get(record.levelname, "")
        parts = [ts, f"{color}{record.levelname:5s}{self.RESET}", f"[{record.name}]"]

        if hasattr(record, "event"):
            parts.append(record.event)
        if hasattr(record, "duration_ms"):
            parts.append(f"({record.duration_ms:.1f}ms)")

        if hasattr(record, "ctx") and record.ctx:
            parts.append(" ".join(f"{k}={_truncate(v)}" for k, v in record.ctx.items()))
        elif record.getMessage() and not hasattr(record, "event"):
            parts.append(record.getMessage())

        if record.exc_info and record.exc_info[1]:
            parts.append(f"\n{''.join(traceback.format_exception(*record.exc_info))}")

        return " ".join(parts)


def setup_logging(level: str = "INFO", log_file: str | None = None, json_format: bool = False):
    """Configure the root linkqr logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, AUDIT).
        log_file: If set, write JSON logs to this file path.
        json_format: If True, use JSON format on console too.
    """
    root = logging.getLogger("linkqr")
    level_name = level.upper()
    root.setLevel(AUDIT if level_name == "AUDIT" else getattr(logging, level_name, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JsonFormatter() if json_format else ConsoleFormatter())
    root.addHandler(console)

    # File handler (always JSON)
    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setFormatter(JsonFormatter())
        root.addHandler(fh)


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger scoped under the linkqr namespace."""
    return logging.getLogger(f"linkqr.{module_name}")


@contextlib.contextmanager
def events(callback: EventCallback | None):
    """Route every :func:`audit` event in the current context to *callback*.

    The hook lives in a context variable, so two renders running in
    different threads or tasks each see only their own callback.
    """
    token = _event_hook.set(callback)
    try:
        yield
    finally:
        _event_hook.reset(token)


def _emit(log: logging.Logger, level: int, event: str, ctx: dict,
          duration_ms: float | None = None, exc_info=None):
    record = log.makeRecord(log.name, level, "", 0, "", (), exc_info)
    record.event = event
    record.ctx = ctx
    if duration_ms is not None:
        record.duration_ms = duration_ms
    log.handle(record)


def audit(event: str, logger: logging.Logger | None = None, **context):
    """Emit an AUDIT-level structured log entry and notify the active event hook.

    Args:
        event: Machine-readable event tag (e.g., "qr.generated").
        logger: Logger to use. Defaults to linkqr root.
        **context: Key-value pairs for the event context.
    """
    log = logger or logging.getLogger("linkqr")
    if log.isEnabledFor(AUDIT):
        _emit(log, AUDIT, event, context)

    hook = _event_hook.get()
    if hook is not None:
        hook(event, dict(context))


def _describe_args(args, kwargs) -> dict:
    described = []
    for a in args:
        kind = type(a).__name__
        s = repr(a)
        # rasters and surfaces are summarised by type only
        if len(s) > 100 or "Image" in kind or "Surface" in kind:
            described.append(f"<{kind}>")
        else:
            described.append(_truncate(s, 80))
    return {"args": described, "kwargs": {k: _truncate(repr(v), 80) for k, v in kwargs.items()}}


def _summarize_result(result) -> str:
    if isinstance(result, (str, int, float, bool)):
        return _truncate(repr(result), 80)
    if isinstance(result, (list, tuple)):
        return f"{type(result).__name__}[{len(result)}]"
    if isinstance(result, dict):
        return f"dict[{len(result)} keys]"
    return type(result).__name__


def trace(func=None, *, logger_name: str | None = None):
    """Decorator that auto-logs function entry/exit with timing.

    - DEBUG ``<fn>.enter`` with arguments
    - INFO ``<fn>.done`` with duration and a result summary
    - ERROR ``<fn>.error`` with traceback and duration, then re-raises
    """
    def decorator(fn):
        log = get_logger(logger_name or fn.__module__.replace("linkqr.", ""))
        name = fn.__name__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if log.isEnabledFor(logging.DEBUG):
                _emit(log, logging.DEBUG, f"{name}.enter", _describe_args(args, kwargs))

            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception:
                if log.isEnabledFor(logging.ERROR):
                    _emit(log, logging.ERROR, f"{name}.error", {"function": name},
                          duration_ms=(time.perf_counter() - start) * 1000, exc_info=sys.exc_info())
                raise

            if log.isEnabledFor(logging.INFO):
                _emit(log, logging.INFO, f"{name}.done", {"result": _summarize_result(result)},
                      duration_ms=(time.perf_counter() - start) * 1000)
            return result

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
