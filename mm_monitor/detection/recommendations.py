"""
Recommendation lifecycle manager.

Keeps at most one active recommendation per (venue, category): an upsert
deactivates whatever is active for the key and inserts the new row. Expired
rows are deactivated by a separate sweep. Inactive rows are never touched
again.

Example:
    >>> manager = RecommendationManager(store)
    >>> await manager.upsert(request, now)
    >>> await manager.expire_stale(now)
"""

from datetime import datetime, timedelta
from typing import List

import structlog

from mm_monitor.models.recommendations import Recommendation, RecommendationRequest
from mm_monitor.storage.base import MonitorStore

logger = structlog.get_logger(__name__)


class RecommendationManager:
    """
    Applies recommendation upserts and expiry sweeps against the store.

    Attributes:
        store: Store holding the recommendations table.
    """

    def __init__(self, store: MonitorStore) -> None:
        self.store = store

    async def upsert(self, request: RecommendationRequest, now: datetime) -> Recommendation:
        """
        Supersede the active recommendation for the request's key.

        Args:
            request: Recommendation to activate.
            now: Creation time (UTC); expiry is now + expires_in_hours.

        Returns:
            Recommendation: The newly inserted active row.
        """
        expires_at = (
            now + timedelta(hours=request.expires_in_hours)
            if request.expires_in_hours is not None
            else None
        )

        superseded = await self.store.deactivate_recommendations(
            request.venue, request.category
        )
        recommendation = await self.store.insert_recommendation(request, now, expires_at)

        logger.info(
            "recommendation_upserted",
            venue=request.venue,
            category=request.category.value,
            action=request.action.value,
            priority=request.priority,
            superseded=superseded,
        )
        return recommendation

    async def upsert_all(
        self, requests: List[RecommendationRequest], now: datetime
    ) -> List[Recommendation]:
        """Upsert requests in order; a later request for the same key wins."""
        return [await self.upsert(request, now) for request in requests]

    async def expire_stale(self, now: datetime) -> int:
        """
        Deactivate recommendations whose expiry has passed.

        Returns:
            int: Number of rows deactivated.
        """
        expired = await self.store.expire_recommendations(now)
        if expired:
            logger.info("recommendations_expired", count=expired)
        return expired
