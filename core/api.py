"""API utilities for FastAPI route handling."""

import functools
import logging
from collections.abc import Callable

from fastapi import HTTPException, status

from core.exceptions import (
    ExternalServiceException,
    RateLimitException,
    ResourceNotFoundException,
    TripPlannerException,
    ValidationException,
)
from core.http.circuit_breaker import CircuitOpen

# (exception type, HTTP status, log level), most specific first
ERROR_STATUS: tuple[tuple[type[TripPlannerException], int, int], ...] = (
    (ValidationException, status.HTTP_400_BAD_REQUEST, logging.WARNING),
    (ResourceNotFoundException, status.HTTP_404_NOT_FOUND, logging.INFO),
    (RateLimitException, status.HTTP_429_TOO_MANY_REQUESTS, logging.WARNING),
    (CircuitOpen, status.HTTP_503_SERVICE_UNAVAILABLE, logging.WARNING),
    (ExternalServiceException, status.HTTP_502_BAD_GATEWAY, logging.ERROR),
    (TripPlannerException, status.HTTP_500_INTERNAL_SERVER_ERROR, logging.ERROR),
)


def status_for(exc: TripPlannerException) -> tuple[int, int]:
    """HTTP status and log level for a planner exception."""
    for exc_type, status_code, level in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, level
    return status.HTTP_500_INTERNAL_SERVER_ERROR, logging.ERROR


def _detail(exc: TripPlannerException, status_code: int) -> str:
    if status_code == status.HTTP_502_BAD_GATEWAY:
        return f"External service error: {exc.message}"
    return exc.message


def api_route(logger: logging.Logger):
    """
    Decorator for FastAPI endpoints that provides standardized error handling.

    HTTPException passes through untouched, planner exceptions are mapped
    through ``ERROR_STATUS`` and anything else becomes a logged 500.

    Usage:
        @router.get("/api/search/example")
        @api_route(logger)
        async def my_endpoint():
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except TripPlannerException as e:
                status_code, level = status_for(e)
                logger.log(
                    level,
                    "%s in %s: %s",
                    type(e).__name__,
                    func.__name__,
                    e.message,
                    exc_info=level >= logging.ERROR,
                )
                headers = None
                if isinstance(e, RateLimitException):
                    headers = {"Retry-After": str(e.retry_after)}
                raise HTTPException(
                    status_code=status_code,
                    detail=_detail(e, status_code),
                    headers=headers,
                ) from e
            except Exception as e:
                logger.exception("Unexpected error in %s", func.__name__)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=str(e),
                ) from e

        return wrapper

    return decorator
