"""
Logging configuration — process-wide handlers and the per-run logger.

``setup_logging`` runs once, from the CLI group callback, and owns every
handler. Engine components never grab a module-level logger: each run
creates one ``RunLogger`` with ``new_run_logger()`` and hands it to
every component constructor, so all records of a run carry its id and
can be grepped out of a shared log file.

Console level precedence:
    CLI flag  >  WGC_LOG_LEVEL env var  >  WARNING (default)

Optional file output via WGC_LOG_FILE / WGC_LOG_FILE_LEVEL env vars.
The file rotates, since the tool typically runs as a recurring task.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import uuid
from collections.abc import MutableMapping
from typing import Any

ENGINE_LOGGER_NAME = "wingetctl.engine"

# ── Formats ─────────────────────────────────────────────────────

# (threshold, format, datefmt): the first threshold >= level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"
_FILE_MAX_BYTES = 2_000_000
_FILE_BACKUPS = 3


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers for this process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to WARNING.
        log_file: Optional path to a rotating log file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for threshold, f, d in _CONSOLE_FORMATS if level <= threshold)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_FILE_MAX_BYTES,
        backupCount=_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING


# ── Run logger ──────────────────────────────────────────────────


class RunLogger(logging.LoggerAdapter):
    """Logger for one engine run; prefixes every message with the run id."""

    def __init__(self, logger: logging.Logger, run_id: str):
        super().__init__(logger, {"run_id": run_id})
        self.run_id = run_id

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.run_id}] {msg}", kwargs

    def child(self, component: str) -> RunLogger:
        """Same run id, records attributed to ``wingetctl.engine.<component>``."""
        return RunLogger(self.logger.getChild(component), self.run_id)


def new_run_logger(run_id: str | None = None) -> RunLogger:
    """Create the logger a single run passes to all of its components."""
    return RunLogger(logging.getLogger(ENGINE_LOGGER_NAME), run_id or uuid.uuid4().hex[:8])
