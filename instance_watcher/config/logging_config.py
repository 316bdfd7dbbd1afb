"""
Logging configuration for the watcher.
"""

import logging
import logging.config
from typing import Any, Dict, Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure watcher logging.

    Args:
        level: Root log level name
        log_file: Durable log file, None logs to stdout only
    """
    level = level.upper()
    handlers = ["console"]

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "urllib3": {
                "level": "WARNING",
            },
        },
        "root": {
            "level": level,
            "handlers": handlers,
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": level,
            "formatter": "default",
            "filename": log_file,
            "encoding": "utf-8",
        }
        handlers.append("file")

    # Apply configuration
    logging.config.dictConfig(config)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured - Level: {level}, File: {log_file or 'none'}")
