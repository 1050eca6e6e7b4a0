from __future__ import annotations

import logging
import os


def get_logger(name: str) -> logging.Logger:
    """Return a module logger with a sensible default configuration."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=os.environ.get("MOLENS_LOG_LEVEL", "INFO").upper(),
            format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        )
    return logger
