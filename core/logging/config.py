from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler, QueueHandler, QueueListener
from queue import Queue
from pathlib import Path
from typing import Optional

from .logger import register_levels, to_level
from .context import ContextFilter
from .formatter import ConsoleFormatter, JSONFormatter

_listener: QueueListener | None = None


def bootstrap_logging(
    *,
    service: str = "gateway",
    level: str | int | None = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "gateway.jsonl",
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> None:
    """Configure the root logger.

    Console output goes to stderr so that stdout stays clean for the JSON
    the CLI prints. When ``log_dir`` is given, records are also written as
    JSON lines to a rotating file through a background queue listener.
    """
    global _listener
    shutdown_logging()
    register_levels()
    root = logging.getLogger()
    root.handlers.clear()
    lvl = to_level(level or os.getenv("LOG_LEVEL", "INFO"))
    root.setLevel(lvl)

    enable_console = os.getenv("LOG_CONSOLE", "true").strip().lower() == "true"
    console_level_str = os.getenv("LOG_CONSOLE_LEVEL", "")
    if enable_console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(to_level(console_level_str) if console_level_str else lvl)
        console.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
        root.addHandler(console)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        json_handler = RotatingFileHandler(str(log_dir / log_file_name), maxBytes=max_bytes, backupCount=backup_count)
        json_handler.setLevel(lvl)
        json_handler.setFormatter(JSONFormatter())
        q: Queue[logging.LogRecord] = Queue(-1)
        queue_handler = QueueHandler(q)
        queue_handler.addFilter(ContextFilter())
        root.addHandler(queue_handler)
        _listener = QueueListener(q, json_handler, respect_handler_level=True)
        _listener.start()

    logging.getLogger("httpx").setLevel(max(lvl, logging.WARNING))
    logging.getLogger(__name__).debug("logging configured for %s", service)


def shutdown_logging() -> None:
    global _listener
    if _listener:
        _listener.stop()
        for handler in _listener.handlers:
            handler.close()
        root = logging.getLogger()
        for handler in [h for h in root.handlers if isinstance(h, QueueHandler)]:
            root.removeHandler(handler)
        _listener = None
