"""httpedit logging setup."""

import logging
import logging.config
import sys


def setup_logging(level: str = "WARNING") -> None:
    """Send httpedit log records to stderr at the given level.

    stdout stays reserved for command output (response bodies, curl
    commands) so it can be piped.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%H:%M:%S",
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "standard",
                    "stream": sys.stderr,
                },
            },
            "loggers": {
                "httpedit": {"level": level, "handlers": ["stderr"], "propagate": False},
                "urllib3": {"level": "WARNING", "handlers": ["stderr"], "propagate": False},
            },
        },
    )
