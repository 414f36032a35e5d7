"""
Logging setup - call configure_logging() once when the app starts
"""
import logging
from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    level = (level or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
                "datefmt": "%H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "level": level
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            # urllib3 logs every connection at DEBUG
            "urllib3": {"level": "WARNING"},
        },
    })
