# cleancloak/core/logger.py

import logging
import sys

from cleancloak.core.config import settings

logger = logging.getLogger("cleancloak")
logger.setLevel(settings.LOG_LEVEL.upper())
logger.propagate = False  # Prevent log duplication

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger under the project logger, e.g. get_logger("auth")."""
    return logger.getChild(name)
