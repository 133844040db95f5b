"""Process-wide logging setup shared by the API and the ingestion job."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once; ``force=True`` replaces handlers left by a
    previous call (e.g. uvicorn reloads).
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # httpx logs every request at INFO, which drowns the pipeline logs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
