"""
Utility functions for the AWS resource tables plugin.
"""

import functools
import inspect
import logging
from typing import Any, Callable, Iterator, TypeVar, cast

from botocore.exceptions import ClientError

LOGGER_NAME = "cloud_tables"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Sets up logging configuration for the plugin.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Prevent duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Return the plugin logger without touching its level or handlers."""
    return logging.getLogger(LOGGER_NAME)


F = TypeVar("F", bound=Callable[..., Any])


def api_error_handler(func: F) -> F:
    """
    Decorator for consistent logging in AWS fetchers and hydrators.

    Logs entry at DEBUG and re-raises every exception. AWS ClientError is
    logged at DEBUG only: the query runner decides whether it is a
    suppressed "not found" (INFO) or a failure (ERROR). Any other exception
    is logged at ERROR here.
    """

    def log_failure(e: Exception) -> None:
        logger = get_logger()
        if isinstance(e, ClientError):
            code = e.response.get("Error", {}).get("Code", "")
            logger.debug(f"AWS ClientError in {func.__name__} ({code}): {e}")
        else:
            logger.error(f"Error in {func.__name__}: {e}")

    # List functions are generators, so errors surface while iterating
    if inspect.isgeneratorfunction(func):

        @functools.wraps(func)
        def generator_wrapper(*args: object, **kwargs: object) -> Iterator[Any]:
            get_logger().debug(func.__name__)
            try:
                yield from func(*args, **kwargs)
            except Exception as e:
                log_failure(e)
                raise

        return cast(F, generator_wrapper)

    @functools.wraps(func)
    def wrapper(*args: object, **kwargs: object) -> Any:
        get_logger().debug(func.__name__)
        try:
            return func(*args, **kwargs)
        except Exception as e:
            log_failure(e)
            raise

    return cast(F, wrapper)
