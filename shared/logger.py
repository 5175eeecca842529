"""
KeyForge Structured Logger
===========================

Every KeyForge module logs through a :class:`ForgeLogger` named
``keyforge.<component>``. :func:`configure_logging` installs the sinks on
the ``keyforge`` parent logger once: a Rich console handler on stderr
and, optionally, a rotating file handler writing plain text or JSON
lines. Component loggers propagate to those sinks unless they are given
sinks of their own.

Keyword arguments passed to the log methods become structured fields.
Generated secrets must never reach a sink, so fields named ``password``,
``value``, ``passphrase`` or ``words`` are replaced with
:data:`REDACTED` by a handler-level filter before formatting.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - OWASP Logging Cheat Sheet (2021): data to exclude from logs.
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from keyforge.core.models import REDACTED

ROOT_LOGGER = "keyforge"

SENSITIVE_FIELDS: frozenset[str] = frozenset({"password", "value", "passphrase", "words"})

_PASSTHROUGH_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})

_PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

__all__ = [
    "REDACTED",
    "ROOT_LOGGER",
    "SENSITIVE_FIELDS",
    "ForgeLogger",
    "Stopwatch",
    "configure_logging",
]


# ========================== Filters / Formatters ===========================


class _RedactSecrets(logging.Filter):
    """Replaces sensitive structured fields on every record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = getattr(record, "fields", None)
        if fields:
            record.fields = {
                key: REDACTED if key in SENSITIVE_FIELDS else val
                for key, val in fields.items()
            }
        return True


class _JSONLinesFormatter(logging.Formatter):
    """One JSON object per record::

        {"timestamp": "...", "level": "INFO", "logger": "keyforge.engine",
         "message": "...", "tool_name": "engine",
         "operation": "generate_password", "extra": {"length": 16}}

    ``operation`` and ``extra`` are omitted when empty.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "tool_name": getattr(record, "tool_name", None),
        }
        operation = getattr(record, "operation", None)
        if operation:
            entry["operation"] = operation
        fields = getattr(record, "fields", None)
        if fields:
            entry["extra"] = fields
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(level: int) -> logging.Handler:
    # stderr keeps stdout clean for piped secrets
    console = Console(
        stderr=True,
        theme=Theme({"log.level.warning": "bold yellow", "log.level.error": "bold red"}),
    )
    return RichHandler(
        level=level,
        console=console,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )


def _file_handler(
    path: Path, level: int, *, json_lines: bool, max_bytes: int, backup_count: int
) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        _JSONLinesFormatter()
        if json_lines
        else logging.Formatter(_PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    )
    return handler


# ========================== Sinks ==========================================


def _level(name: str | None) -> int:
    if name is None:
        return logging.NOTSET
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _sinks(
    level: int,
    *,
    log_file: str | Path | None,
    json_logs: bool,
    max_bytes: int,
    backup_count: int,
    console_output: bool,
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if console_output:
        handlers.append(_console_handler(level))
    if log_file:
        handlers.append(
            _file_handler(
                Path(log_file),
                level,
                json_lines=json_logs,
                max_bytes=max_bytes,
                backup_count=backup_count,
            )
        )
    return handlers


def _replace_handlers(logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.addFilter(_RedactSecrets())
        logger.addHandler(handler)


def configure_logging(
    log_level: str = "WARNING",
    *,
    log_file: str | Path | None = None,
    json_logs: bool = False,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
    console_output: bool = True,
) -> logging.Logger:
    """Install the sinks shared by every ``keyforge.*`` logger.

    Calling it again replaces the previous sinks. With no console and no
    file a :class:`logging.NullHandler` is installed, so nothing falls
    through to Python's last-resort stderr handler.
    """
    level = _level(log_level)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    handlers = _sinks(
        level,
        log_file=log_file,
        json_logs=json_logs,
        max_bytes=max_bytes,
        backup_count=backup_count,
        console_output=console_output,
    )
    _replace_handlers(root, handlers or [logging.NullHandler()])
    return root


@dataclass
class Stopwatch:
    """Elapsed-time holder yielded by :meth:`ForgeLogger.timed`."""

    started: float = field(default_factory=time.perf_counter)
    stopped: float | None = None

    @property
    def elapsed(self) -> float:
        return (self.stopped or time.perf_counter()) - self.started


# ========================== ForgeLogger ====================================


class ForgeLogger:
    """Structured logger bound to one KeyForge component.

    Usage::

        logger = ForgeLogger("collectors.wordlist")   # module level
        with logger.operation("load"):
            logger.warning("Mirror down", language="en")

    Without sinks of its own the logger propagates to whatever
    :func:`configure_logging` installed. Passing *log_file* or
    *console_output* gives it private sinks instead.

    Args:
        tool_name: Component name; the stdlib logger is ``keyforge.<tool_name>``.
        log_level: Minimum level name (``DEBUG`` ... ``CRITICAL``); ``None``
            inherits the level of the ``keyforge`` logger.
        log_file: Private rotating log file.
        json_logs: Write JSON lines instead of plain text to *log_file*.
        max_bytes: Rotation size of *log_file*.
        backup_count: Rotated files kept.
        console_output: Attach a private Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str | None = None,
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = False,
    ) -> None:
        self._tool_name = tool_name
        self._operation: str | None = None

        level = _level(log_level)
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.{tool_name}")
        self._logger.setLevel(level)

        handlers = _sinks(
            level,
            log_file=log_file,
            json_logs=json_logs,
            max_bytes=max_bytes,
            backup_count=backup_count,
            console_output=console_output,
        )
        self._logger.propagate = not handlers
        _replace_handlers(self._logger, handlers)

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def underlying(self) -> logging.Logger:
        return self._logger

    # ------------------------------------------------------------------ #
    #  Context
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[ForgeLogger]:
        """Tag every record emitted inside the block with ``operation=name``."""
        previous, self._operation = self._operation, name
        try:
            yield self
        finally:
            self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[Stopwatch]:
        """Log start and finish of *label* at DEBUG with the elapsed time."""
        watch = Stopwatch()
        self.debug("Started: %s", label)
        try:
            yield watch
        finally:
            watch.stopped = time.perf_counter()
            self.debug("Completed: %s (%.3f sec)", label, watch.elapsed)

    # ------------------------------------------------------------------ #
    #  Emit
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        passthrough = {k: kwargs.pop(k) for k in list(kwargs) if k in _PASSTHROUGH_KWARGS}
        extra = {
            "tool_name": self._tool_name,
            "operation": self._operation,
            "fields": kwargs,
        }
        passthrough.setdefault("stacklevel", 3)
        self._logger.log(level, msg, *args, extra=extra, **passthrough)

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, args, fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.INFO, msg, args, fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.WARNING, msg, args, fields)

    def error(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.ERROR, msg, args, fields)

    def exception(self, msg: str, *args: Any, **fields: Any) -> None:
        fields.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, fields)
