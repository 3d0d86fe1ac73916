"""
Fire-and-forget click counting.

The redirect handler never waits for the click increment: each click is
counted by an independent task with its own database session, and a
failed increment is logged and dropped.
"""

import asyncio
import logging
import uuid
from typing import Callable, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.db.base import async_session_factory
from link_shortener.db.session import SessionManager
from link_shortener.repositories.link_repository import LinkRepository

logger = logging.getLogger(__name__)


class ClickTracker:
    """
    Schedule click increments outside the request that triggered them.

    Args:
        session_factory: Factory for the sessions the increments run in
        link_repository: Repository performing the increment
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session_factory,
        link_repository: Optional[LinkRepository] = None
    ):
        self.session_factory = session_factory
        self.link_repository = link_repository or LinkRepository()
        self._pending: Set[asyncio.Task] = set()

    def track(self, link_id: uuid.UUID) -> asyncio.Task:
        """Start counting one click for ``link_id`` and return immediately."""
        task = asyncio.create_task(self._increment(link_id))
        # The event loop only keeps weak references to tasks
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _increment(self, link_id: uuid.UUID) -> None:
        try:
            async with SessionManager.transaction_context(self.session_factory) as session:
                found = await self.link_repository.increment_click_count(session, link_id)
            if not found:
                logger.warning(f"Click for link {link_id} dropped, link no longer exists")
        except Exception as e:
            logger.error(f"Failed to increment click count for link {link_id}: {e}", exc_info=True)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled increment to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


# Shared tracker used by the redirect route
click_tracker = ClickTracker()


def get_click_tracker() -> ClickTracker:
    return click_tracker
