"""Centralized logging configuration.

Everything logs under the ``medicore`` logger. Subsystems that produce a lot
of output (remote sync, the assistant) get a child logger so their level can
be tuned on its own, e.g. ``logging.getLogger("medicore.sync")``.
"""

import logging
import sys

from app.config import settings


LOGGER_NAME = "medicore"

# Driver loggers that are chatty at INFO
NOISY_LOGGERS = ("pymongo", "motor", "httpx", "openai")


def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    
    level_name = settings.LOG_LEVEL.upper()
    level = getattr(logging, level_name, logging.INFO)
    
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    
    # Prevent duplicate handlers when the module is re-imported (reload, tests)
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(console_handler)
    
    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    
    logger.debug(f"Logging configured with level: {level_name} ({settings.ENVIRONMENT})")
    
    return logger


def get_logger(component: str) -> logging.Logger:
    """Child logger of the application logger for one subsystem."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


# Create the global logger instance
logger = setup_logging()
