from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from .context import get_context


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    ctx = getattr(record, "log_context", None)
    return dict(ctx) if ctx is not None else get_context()

_LEVEL_COLORS = {
    "TRACE": "\033[90m",
    "DEBUG": "\033[37m",
    "INFO": "\033[36m",
    "SUCCESS": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

# Attributes every LogRecord has; anything else came in through ``extra``.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and k not in ("service", "log_context")}


def _record_metadata(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.created)),
        "level": record.levelname,
        "service": getattr(record, "service", None),
        "logger": record.name,
        "function": record.funcName,
        "line_number": record.lineno,
    }


class ConsoleFormatter(logging.Formatter):
    def __init__(self, *, color: bool = True) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        md = _record_metadata(record)
        ctx = _context_of(record)
        parts = [
            md["timestamp"],
            md["level"],
            md["service"] or "-",
            ctx.get("query_id", "-"),
            f"{md['logger']}:{md['function']}:{md['line_number']}",
            record.getMessage(),
        ]
        fields = {**{k: v for k, v in ctx.items() if k != "query_id"}, **_extras(record)}
        if fields:
            parts.append(" ".join(f"{k}={v}" for k, v in fields.items()))
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))
        line = " | ".join(parts)
        if not self.color:
            return line
        return f"{_LEVEL_COLORS.get(md['level'], '')}{line}{_RESET}"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = _record_metadata(record)
        payload["message"] = record.getMessage()
        ctx = _context_of(record)
        if ctx:
            payload["context"] = ctx
        extras = _extras(record)
        if extras:
            payload["fields"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))
