"""Logging setup for the orderbom command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the entry point.

Log format:
    2026-10-18 10:15:30 [INFO    ] orderbom.domain.service.order_rollup_service - Built rollup ...
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "orderbom-console"


def configure_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Attach a stderr handler to the ``orderbom`` logger (idempotent)."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    root = logging.getLogger("orderbom")
    root.setLevel(level)

    # sys.stderr may have been swapped since the previous call (CliRunner),
    # so the handler is rebuilt instead of reused.
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    root.addHandler(handler)
    return root
