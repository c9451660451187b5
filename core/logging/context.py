"""Per-task logging context.

Fields bound here are attached to every record emitted from the same
asyncio task (contextvars are copied into tasks at creation), so a query
id bound by the resolver shows up on the transport logs of that query.
"""
from __future__ import annotations

import contextvars
import logging
import uuid
from typing import Any, Dict

_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("log_context", default={})


def get_context() -> Dict[str, Any]:
    return dict(_context.get())


def bind(**values: Any) -> None:
    current = dict(_context.get())
    current.update({k: v for k, v in values.items() if v is not None})
    _context.set(current)


def unbind(*keys: str) -> None:
    current = dict(_context.get())
    for k in keys:
        current.pop(k, None)
    _context.set(current)


def new_query_id() -> str:
    return uuid.uuid4().hex[:12]


class context(object):
    """Bind fields for the duration of a ``with`` block."""

    def __init__(self, **values: Any) -> None:
        self._values = values
        self._token: contextvars.Token | None = None

    def __enter__(self) -> Dict[str, Any]:
        current = dict(_context.get())
        current.update({k: v for k, v in self._values.items() if v is not None})
        self._token = _context.set(current)
        return current

    def __exit__(self, exc_type, exc, tb):
        if self._token is not None:
            _context.reset(self._token)
            self._token = None
        return False


class ContextFilter(logging.Filter):
    """Copy the bound fields onto the record while still on the emitting task.

    Handlers behind a queue format on the listener thread, where the
    task's context is no longer visible.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "log_context"):
            record.log_context = get_context()
        return True
