"""Logging setup shared by the CLI and the migration environment."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: int | str = logging.INFO, *, force: bool = False) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, force=force)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
