"""Shared utilities for pagewatch."""

from .async_utils import (
    AsyncContextManager,
    gather_with_limit,
    retry_async,
    run_with_timeout,
)
from .logging import get_logger, get_structured_logger, setup_logging
from .types import AsyncTimeoutError, UtilityError

__all__ = [
    "setup_logging",
    "get_logger",
    "get_structured_logger",
    "run_with_timeout",
    "gather_with_limit",
    "retry_async",
    "AsyncContextManager",
    "UtilityError",
    "AsyncTimeoutError",
]
