"""Logging bootstrap shared by the API, the forecaster and the repository.

Every module asks for its logger through ``get_logger(__name__)``. The first
request installs a single stdout handler at the level named by
``Settings.log_level``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from backend.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stdout handler; ``level`` overrides ``Settings.log_level``.

    Only the first call has an effect.
    """
    global _configured
    if _configured:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, stream=sys.stdout)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
