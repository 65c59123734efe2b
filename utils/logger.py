from __future__ import annotations

import json
import logging
import logging.handlers
import sys
import time
import uuid
from contextvars import ContextVar
from functools import wraps
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from config.settings import AppSettings

# Correlation ID for tracing every record emitted during one detection cycle
_cycle_id: ContextVar[str] = ContextVar("cycle_id", default="")

_NOISY_LOGGERS = ("urllib3", "requests", "yfinance", "peewee")


def set_cycle_id(cid: str) -> None:
    _cycle_id.set(cid)


def get_cycle_id() -> str:
    return _cycle_id.get()


def new_cycle_id() -> str:
    return uuid.uuid4().hex[:12]


def _context(record: logging.LogRecord) -> dict[str, Any]:
    """Cycle id, timing and extra_data attached to a record, in output order."""
    ctx: dict[str, Any] = {}
    cid = _cycle_id.get()
    if cid:
        ctx["cycle_id"] = cid
    if hasattr(record, "duration_ms"):
        ctx["duration_ms"] = record.duration_ms
    ctx.update(getattr(record, "extra_data", None) or {})
    return ctx


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        ctx = _context(record)
        for key in ("cycle_id", "duration_ms"):
            if key in ctx:
                entry[key] = ctx.pop(key)
        if ctx:
            entry["extra"] = ctx
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{self.formatTime(record, self.datefmt)} [{record.name}] "
            f"{record.levelname}: {record.getMessage()}"
        )
        ctx = _context(record)
        if "duration_ms" in ctx:
            ctx["duration_ms"] = f"{ctx['duration_ms']:.1f}"
        if ctx:
            line += " | " + " ".join(f"{k}={v}" for k, v in ctx.items())
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


# Handlers installed by setup_logging, so a reconfigure only replaces our own
_handlers: list[logging.Handler] = []


def _default_log_file(config: AppSettings) -> Path:
    return Path(config.project_root) / "storage" / "logs" / "double_bottom_agent.log"


def setup_logging(config: AppSettings | None = None, force: bool = False) -> None:
    """
    Configure the root logger from settings (log_level, log_format, log_file).

    Runs once; later calls are no-ops unless `force` is set, in which case the
    handlers from the previous call are replaced.
    """
    if _handlers and not force:
        return
    if config is None:
        from config.settings import settings as config

    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    formatter: logging.Formatter
    if config.log_format.lower() == "json":
        formatter = JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = TextFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    log_file = Path(config.log_file) if config.log_file else _default_log_file(config)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    for handler in (console, file_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _handlers.append(handler)

    root.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; its level stays NOTSET so the configured root level applies."""
    setup_logging()
    return logging.getLogger(name)


def log_cycle(func):
    """Decorator for cycle entry points: tags records with a fresh cycle_id, logs duration/error."""
    logger = logging.getLogger(f"agent.cycle.{func.__name__}")

    @wraps(func)
    def wrapper(*args, **kwargs):
        token = _cycle_id.set(new_cycle_id())
        logger.info("Cycle started")
        t0 = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception:
            logger.exception("Cycle failed", extra={"duration_ms": (time.perf_counter() - t0) * 1000})
            raise
        else:
            logger.info("Cycle completed", extra={"duration_ms": (time.perf_counter() - t0) * 1000})
            return result
        finally:
            _cycle_id.reset(token)

    return wrapper
