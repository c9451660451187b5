"""Structured logging for the gateway."""
from .config import bootstrap_logging, shutdown_logging
from .context import bind, context, get_context, new_query_id, unbind
from .logger import LogLevel, StructuredLogger, get_logger, traceable

__all__ = [
    "bootstrap_logging",
    "shutdown_logging",
    "bind",
    "context",
    "get_context",
    "new_query_id",
    "unbind",
    "LogLevel",
    "StructuredLogger",
    "get_logger",
    "traceable",
]
