from __future__ import annotations

import logging
import sys

import structlog

ACCESS_LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def _coerce_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def _configure_access_log(level: int) -> None:
    """Give uvicorn's request lines a timestamped plain-text format.

    They are emitted through stdlib logging directly, not through structlog.
    """
    formatter = logging.Formatter(ACCESS_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    access_logger = logging.getLogger("uvicorn.access")
    if not access_logger.handlers:
        access_logger.addHandler(logging.StreamHandler(sys.stdout))
    for handler in access_logger.handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    access_logger.setLevel(level)


def setup_logging(level: str | int = "INFO") -> None:
    """Configure structlog and stdlib logging for the reconciler service."""

    logging_level = _coerce_level(level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=logging_level)
    _configure_access_log(logging_level)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    # Stays a lazy proxy so module-level loggers pick up setup_logging() later.
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
