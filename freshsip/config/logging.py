"""Logging configuration for the application."""
import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

from freshsip.config.settings import Settings, settings as default_settings


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """Build the dictConfig payload for the given settings."""

    # Define log format
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    detailed_format = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    console_formatter = "json" if settings.LOG_FORMAT.lower() == "json" else "simple"

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL.upper(),
            "formatter": console_formatter,
            "stream": "ext://sys.stdout"
        }
    }
    app_handlers = ["console"]
    access_handlers = ["console"]

    if settings.LOG_TO_FILE:
        logs_dir = Path(settings.LOG_DIR)
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.update({
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "DEBUG",
                "formatter": "detailed",
                "filename": str(logs_dir / "app.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5
            },
            "error_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "ERROR",
                "formatter": "detailed",
                "filename": str(logs_dir / "error.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5
            },
            "access_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": "detailed",
                "filename": str(logs_dir / "access.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5
            }
        })
        app_handlers = ["console", "file", "error_file"]
        access_handlers = ["console", "access_file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": log_format,
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "detailed": {
                "format": detailed_format,
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "json": {
                "()": "freshsip.core.logging.JSONFormatter"
            }
        },
        "handlers": handlers,
        "loggers": {
            # Root logger
            "": {
                "level": settings.LOG_LEVEL.upper(),
                "handlers": ["console"],
                "propagate": False
            },
            # Application logger
            "freshsip": {
                "level": settings.LOG_LEVEL.upper(),
                "handlers": app_handlers,
                "propagate": False
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": access_handlers,
                "propagate": False
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": access_handlers,
                "propagate": False
            },
            "pymongo": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False
            }
        }
    }


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Setup logging configuration."""
    settings = settings or default_settings
    logging.config.dictConfig(build_logging_config(settings))

    logger = logging.getLogger("freshsip")
    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)
