"""Logging configuration and utilities using Loguru.

The package logs through Loguru but stays silent until the host application
opts in, as libraries should. Call ``setup_loguru_logger()`` once at startup
to enable the ``songlink`` namespace and install console/file sinks.

Public API:
----------
setup_loguru_logger(verbose: bool = False) -> None
    Enable songlink logging and configure sinks

get_logger(name: str) -> Logger
    Get a context-aware logger for your module
    Usage: logger = get_logger(__name__)

@resilient_operation(operation_name: str)
    Decorator for boundary calls: logs the failure and re-raises it
"""

from functools import wraps
import sys
from typing import Any

from loguru import logger

from .settings import settings

# Library default: emit nothing until the application enables us
logger.disable("songlink")


def setup_loguru_logger(verbose: bool = False) -> None:
    """Configure Loguru for applications embedding songlink.

    Args:
        verbose: Enable verbose logging with debug level and detailed tracebacks

    Note:
        - Removes the default handler and installs a colorized console sink
        - Adds a JSON file sink when ``settings.logging.log_file`` is set
    """
    logger.remove()
    logger.enable("songlink")
    logger.configure(extra={"service": "songlink", "module": "root"})

    console_level = "DEBUG" if verbose else settings.logging.console_level
    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[service]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    if settings.logging.log_file is not None:
        log_file = settings.logging.log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            sink=str(log_file),
            level=settings.logging.file_level,
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            backtrace=True,
            diagnose=True,
            enqueue=True,  # Worker threads log concurrently
            catch=True,
            serialize=True,
        )


def get_logger(name: str) -> Any:  # Use Any for Loguru logger type
    """Get a pre-configured logger instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger bound with module and service context

    Example:
        ```python
        logger = get_logger(__name__).bind(service="cache")
        logger.debug("Cache miss", key=key)
        ```
    """
    return logger.bind(module=name, service="songlink")


def resilient_operation(operation_name=None):
    """Decorator for boundary operations with standardized error logging.

    The wrapped call is never retried and its exception is never swallowed;
    the failure is logged with the operation name and re-raised.

    Example:
        >>> @resilient_operation("songlink_fetch")
        >>> def fetch(url, user_agent):
        >>>     ...
    """

    def decorator(func):
        op_name = operation_name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.bind(service="songlink", error_type=type(e).__name__).error(
                    "Error in {}: {!s}", op_name, e
                )
                raise

        return wrapper

    return decorator
