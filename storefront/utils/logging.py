# storefront/utils/logging.py
import logging
import sys
from typing import Any

import structlog

from storefront.utils.settings import ENVIRONMENT, LOG_LEVEL

_configured = False


def setup_stdlib_logging(level: str) -> None:
    """Handler na stdout dla loggera storefront, structlog renderuje tresc."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("storefront")
    root.setLevel(level)
    root.handlers = [handler]
    root.propagate = False

    #biblioteki sa glosne na DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def setup_structlog(environment: str) -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str | None = None, environment: str | None = None) -> None:
    global _configured
    if _configured:
        return

    setup_stdlib_logging((level or LOG_LEVEL).upper())
    setup_structlog((environment or ENVIRONMENT).lower())
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Pola dodawane do kazdego kolejnego wpisu w tym kontekscie (request, task)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
