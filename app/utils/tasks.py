
import logging
from typing import Awaitable, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_best_effort(operation: Awaitable[T], description: str) -> Optional[T]:
    """
    Await a side operation whose failure must not affect the caller.

    Errors are logged and never propagated. There is no retry, cancellation
    or timeout beyond whatever the operation enforces itself.

    Args:
        operation: Awaitable to run.
        description: Human-readable label used in the log line.

    Returns:
        Optional[T]: The operation's result, or None if it raised.
    """
    try:
        return await operation
    except Exception as e:
        logger.warning(f"Best-effort {description} failed: {e!r}")
        return None
