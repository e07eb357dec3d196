"""Configuration module for songlink.

Public API:
----------
settings: Settings instance
    Pydantic settings object with nested configuration

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(verbose: bool = False) -> None
    Enable and configure songlink logging in an application

resilient_operation(operation_name: str)
    Decorator for logging errors from external calls

Usage:
------
```python
from songlink.config import settings
size = settings.client.cache_size

from songlink.config import get_logger
logger = get_logger(__name__)
logger.info("Resolving", uri=uri)
```
"""

from .logging import get_logger, resilient_operation, setup_loguru_logger
from .settings import (
    DEFAULT_ENDPOINT,
    DEFAULT_USER_AGENT,
    Settings,
    settings,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "DEFAULT_USER_AGENT",
    "Settings",
    "get_logger",
    "resilient_operation",
    "settings",
    "setup_loguru_logger",
]
