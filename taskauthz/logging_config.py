from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for this repo.

    Notes:
    - Uvicorn already configures handlers; this function mainly sets levels for our package.
    - Set `APP_LOG_LEVEL=DEBUG` to see every authorization decision.
    """

    normalized = level.upper()
    logging.getLogger("taskauthz").setLevel(normalized)
    logging.getLogger("taskauthz").propagate = True
