"""Best-effort wrapper for analytics reads and writes.

Visit tracking and keyword aggregation must never break the page that
triggered them, so database failures inside the analytics services are
logged and converted into a safe default instead of propagating.
"""

import copy
import functools
import inspect
from typing import Any, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


def with_fallback(
    default: Any = None,
    *,
    recover: Optional[Callable[..., Any]] = None,
):
    """Decorate an async service method with the catch-log-default policy.

    Args:
        default: Value returned when the wrapped call raises. A deep copy is
            returned each time so callers can mutate it freely.
        recover: Optional callable invoked with the same arguments as the
            wrapped method (``self`` included) to compute the result instead
            of ``default``. May be sync or async.

    The owning service's ``db`` session, when present, is rolled back so the
    request-scoped session stays usable after the failure.
    """

    def decorator(func: Callable[..., Awaitable[Any]]):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except Exception as e:
                log = getattr(self, "logger", logger)
                log.error(
                    "analytics_query_failed",
                    operation=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                await _rollback_quietly(self, log)

                if recover is not None:
                    result = recover(self, *args, **kwargs)
                    if inspect.isawaitable(result):
                        result = await result
                    return result
                return copy.deepcopy(default)

        return wrapper

    return decorator


async def _rollback_quietly(service: Any, log: Any) -> None:
    """Roll back the service's session after a failed statement."""
    db = getattr(service, "db", None)
    if db is None:
        return
    try:
        await db.rollback()
    except Exception as e:
        log.warning("session_rollback_failed", error=str(e))
