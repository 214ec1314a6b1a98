"""
Per-operation error tiers for the data access layer.

ERROR TIERS
===========

  SURFACED             failure comes back as a result object the caller checks
                       (create, update, visibility toggles, bookings, images)
  SILENCED_TO_EMPTY    failure is logged, caller gets an empty list
                       (event and booking listings)
  SILENCED_TO_DEFAULT  failure is logged, caller gets a neutral value
                       (booking cost aggregate -> 0)

Listing callers cannot tell "nothing there" from "fetch failed"; pages rely
on that to render an empty state instead of an error.

Nothing raised inside a decorated operation escapes it. The session passed
as the first argument is rolled back before the fallback is returned, so the
caller can keep using it.
"""

import functools
import time
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_store_operation

logger = get_logger(__name__)

T = TypeVar("T")


class ErrorTier(str, Enum):
    SURFACED = "surfaced"
    SILENCED_TO_EMPTY = "silenced_to_empty"
    SILENCED_TO_DEFAULT = "silenced_to_default"


class StoreError(Exception):
    """A call reached the store but the answer is unusable."""


def _empty(_: str) -> list:
    return []


def _zero(_: str) -> float:
    return 0.0


async def _rollback(session: Any) -> None:
    if not isinstance(session, AsyncSession):
        return
    try:
        await session.rollback()
    except Exception as e:
        logger.error("session_rollback_failed", error=str(e))


def handle_errors(
    tier: ErrorTier,
    fallback: Callable[[str], Any] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Wrap a data access coroutine so every exception becomes `fallback(message)`.

    `fallback` defaults to an empty list for SILENCED_TO_EMPTY and 0 for
    SILENCED_TO_DEFAULT; SURFACED operations must pass the failure
    constructor of their result type.
    """
    if fallback is None:
        if tier is ErrorTier.SILENCED_TO_EMPTY:
            fallback = _empty
        elif tier is ErrorTier.SILENCED_TO_DEFAULT:
            fallback = _zero
        else:
            raise ValueError("SURFACED operations need an explicit fallback")

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        operation = func.__name__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                message = str(e) or "Unknown error"
                if args:
                    await _rollback(args[0])

                elapsed = time.perf_counter() - started
                if tier is ErrorTier.SURFACED:
                    logger.warning("operation_failed", operation=operation, tier=tier.value, error=message)
                    record_store_operation(operation, "surfaced", elapsed)
                else:
                    logger.error("operation_failed", operation=operation, tier=tier.value, error=message)
                    record_store_operation(operation, "silenced", elapsed)
                return fallback(message)

            record_store_operation(operation, "ok", time.perf_counter() - started)
            return result

        wrapper.error_tier = tier
        return wrapper

    return decorator
