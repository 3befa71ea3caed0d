"""
Process-wide logging setup.
"""

from __future__ import annotations

import logging

from . import settings

_HANDLER_NAME = "portfolio-api"


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel(level or settings.log_level())

    # Reloads (uvicorn --reload, tests) must not stack handlers.
    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(settings.log_format()))
    root.addHandler(handler)
