"""
Logging configuration for the CineConcerts server.

uvicorn's access log drops health probe lines; everything under the
``cineconcerts`` logger follows LOG_LEVEL and the MCP SDK only reports
warnings.
"""

import logging
import logging.config
from typing import Any, Dict

HEALTH_PATH = "/health"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for ``GET <health path>``."""

    def __init__(self, path: str = HEALTH_PATH):
        super().__init__()
        self.path = path
        # uvicorn renders the request line as "GET /path HTTP/1.1"
        self._markers = (f'"GET {path} ', f'"GET {path}?')

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not any(marker in message for marker in self._markers)


def get_logging_config(level: str = "INFO", health_path: str = HEALTH_PATH) -> Dict[str, Any]:
    """dictConfig for uvicorn, the app and the MCP SDK loggers."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter,
                "path": health_path,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "cineconcerts": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "mcp": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", health_path: str = HEALTH_PATH) -> None:
    """Apply the logging configuration to the running process."""
    logging.config.dictConfig(get_logging_config(level, health_path))
