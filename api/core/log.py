"""
Root logging setup. Call once, before the server starts.
"""

from __future__ import annotations

import logging

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "debug") -> None:
    name = (level or "").strip().upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown LOG_LEVEL: {level!r}.")

    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(max(numeric, logging.WARNING))
