"""
Structured JSON Logging Module.

All loggers live under the ``doyence`` namespace and share one pair of
handlers (stdout and a rotating file) installed on the namespace root by
:func:`configure_logging`.  Every line is a JSON object::

    {"timestamp": "...", "level": "INFO", "logger": "doyence.session",
     "message": "Signed in", "event": "LOGIN", "context": {"user_id": "u-1"}}

The ``event`` passed through ``extra`` is the audit key used to trace
sign-in, sign-out and forced idle logout; any other ``extra`` fields land
under ``context``.  Credential fields are masked before they are written.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

ROOT_LOGGER_NAME = "doyence"

REDACTED = "[redacted]"
SECRET_FIELDS: frozenset[str] = frozenset(
    {"password", "token", "access_token", "refresh_token"}
)

# Attribute names every LogRecord carries; anything else came from ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.makeLogRecord({})).keys()
) | {"message", "asctime", "taskName"}


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON line with ``event`` and ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS:
                continue
            if key == "event":
                entry["event"] = str(value)
            elif key in SECRET_FIELDS:
                context[key] = REDACTED
            else:
                context[key] = _jsonable(value)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


def _qualified(name: str) -> str:
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def _file_handler(
    log_file: str, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def configure_logging(
    level: int = logging.INFO,
    stream: Optional[TextIO] = None,
    log_file: Optional[str] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    force: bool = False,
) -> logging.Logger:
    """Install the JSON handlers on the ``doyence`` root logger.

    Only the first call has an effect unless *force* is set, in which case
    the existing handlers are closed and replaced.  File settings default
    to ``LOG_FILE``, ``LOG_MAX_BYTES`` and ``LOG_BACKUP_COUNT``; a log file
    that cannot be opened leaves console logging in place.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers and not force:
        return root

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    # Lazy import: config itself logs through the stdlib logger.
    from doyence.config import get_config
    cfg = get_config()

    root.setLevel(level)
    root.propagate = False
    formatter = JSONFormatter()

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    target = log_file or cfg.LOG_FILE
    try:
        rotating = _file_handler(
            target,
            max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
            backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
        )
    except OSError as exc:
        root.warning(
            "Could not open log file '%s': %s. Logging to the console only.",
            target, exc,
            extra={"event": "LOG_FILE_UNAVAILABLE"},
        )
    else:
        rotating.setFormatter(formatter)
        root.addHandler(rotating)
    return root


class StructuredLogger:
    """Injectable logger for one component.

    ``StructuredLogger("auth")`` writes as ``doyence.auth``::

        log = StructuredLogger("auth")
        log.info("Signed in", extra={"event": "LOGIN", "user_id": uid})
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME, level: Optional[int] = None) -> None:
        configure_logging()
        self._logger: logging.Logger = logging.getLogger(_qualified(name))
        if level is not None:
            self._logger.setLevel(level)

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    return StructuredLogger(name)
