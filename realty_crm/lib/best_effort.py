"""
Best-effort secondary writes.

Some writes ride along with a primary operation (caching a recomputed
summary, bumping a lead counter, linking an uploaded file). Their failure is
logged and never changes the outcome of the primary operation.
"""
import logging
from typing import Awaitable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def best_effort(
    description: str,
    operation: Awaitable,
    session: Optional[AsyncSession] = None,
) -> bool:
    """
    Await a secondary write, logging instead of raising on failure.

    When a session is given it is rolled back after a failure so the caller
    can keep using it.

    Returns:
        True if the operation completed, False otherwise.
    """
    try:
        await operation
        return True
    except Exception as e:
        logger.warning("Best-effort step failed (%s): %s", description, e)
        if session is not None:
            await session.rollback()
        return False
