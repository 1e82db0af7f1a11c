# hexagono/core/logging_config.py
import logging
import sys

import structlog

from hexagono.core.settings import settings


def setup_logging() -> None:
    """
    Configura structlog + logging estándar.
    Los logs salen como JSON por stdout.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Logger global, importable desde cualquier módulo
logger = structlog.get_logger("hexagono")
