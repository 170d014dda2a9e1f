# File: admin_core/core/logging_config.py

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for processes that embed the admin core.

    Args:
        level: Log level name; defaults to the LOG_LEVEL setting
    """
    if level is None:
        from admin_core.core.config import settings

        level = settings.LOG_LEVEL

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)

    # Driver loggers are noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
