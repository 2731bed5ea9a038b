from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for the ``personnel_requests`` logger tree.

    Uvicorn installs the handlers; this only controls verbosity. Use
    ``APP_LOG_LEVEL=DEBUG`` to see individual authorization decisions.
    """

    normalized = level.upper()
    logger = logging.getLogger("personnel_requests")
    logger.setLevel(normalized)
    logger.propagate = True
