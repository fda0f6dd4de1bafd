"""
Logging setup for processes embedding the engine.

The engine modules only ever call logging.getLogger(__name__); this helper is
for the host process that wants the same format everywhere.
"""

import logging

from fastform.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging and the fastform logger level from settings."""
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=LOG_FORMAT,
    )

    # Enable DEBUG for the engine to troubleshoot rejected submissions
    if settings.debug:
        logging.getLogger("fastform").setLevel(logging.DEBUG)
