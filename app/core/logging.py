"""
Logging configuration.
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional

from app.core.config import Settings, settings as default_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure the root logger once for the whole process."""
    settings = settings or default_settings
    level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        }
    }
    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": settings.LOG_FILE,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
        }

    # Library loggers stay quiet unless we are debugging
    library_level = "DEBUG" if settings.DEBUG else "WARNING"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers),
        },
        "loggers": {
            "sqlalchemy.engine": {"level": library_level},
            "uvicorn.access": {"level": library_level},
        },
    })
