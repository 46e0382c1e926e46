"""Structured logging helpers with run, phase and file correlation context.

Context values live in ``contextvars`` so they follow the code that set
them. Worker threads start with empty context; the extractor sets the file
field inside each worker.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, Union

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | phase=%(phase)s | "
    "file=%(file)s | %(name)s | %(message)s"
)

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar("phase", default="-")
_FILE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar("file", default="-")


class CodemapContextFilter(logging.Filter):
    """Inject run/phase/file correlation fields into all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID_VAR.get()
        record.phase = _PHASE_VAR.get()
        record.file = _FILE_VAR.get()
        return True


def _ensure_filter_on_root_handlers() -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if not any(isinstance(f, CodemapContextFilter) for f in handler.filters):
            handler.addFilter(CodemapContextFilter())


def parse_log_level(level: Union[int, str]) -> int:
    """Accept a logging level number or name such as ``"debug"``.

    Raises:
        ValueError: If the name is not a logging level.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_structured_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging format with run/phase/file context."""
    level = parse_log_level(level)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)
    _ensure_filter_on_root_handlers()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate run correlation ID."""
    value = run_id or uuid.uuid4().hex[:12]
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    return _RUN_ID_VAR.get()


def get_phase() -> str:
    return _PHASE_VAR.get()


def get_file() -> str:
    return _FILE_VAR.get()


@contextmanager
def phase_scope(phase: str) -> Iterator[None]:
    """Temporarily set phase context for emitted logs."""
    token = _PHASE_VAR.set(phase)
    try:
        yield
    finally:
        _PHASE_VAR.reset(token)


@contextmanager
def file_scope(path: str) -> Iterator[None]:
    """Temporarily tag emitted logs with the file being extracted."""
    token = _FILE_VAR.set(path)
    try:
        yield
    finally:
        _FILE_VAR.reset(token)
