"""
Companion roster autosave.

Keeps the traveler roster of an unfinished booking in Redis so a traveler who
reloads the wizard for the same product does not retype every companion.
Autosave is best-effort: Redis failures are logged and never block the wizard.
"""

import json
import logging
from collections.abc import Sequence

from redis.exceptions import RedisError

from booking.models import Companion
from shared.config import get_settings
from shared.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class RosterCache:
    """
    Redis-backed store for companion rosters.

    Key pattern: booking:{owner_id}:{product_id}:companions
    """

    def __init__(self, owner_id: str, client=None, ttl_seconds: int | None = None) -> None:
        self.owner_id = owner_id
        self._client = client
        self.ttl_seconds = ttl_seconds or get_settings().ROSTER_CACHE_TTL_SECONDS

    @property
    def client(self):
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    def key(self, product_id: str) -> str:
        return f"booking:{self.owner_id}:{product_id}:companions"

    async def save(self, product_id: str, companions: Sequence[Companion]) -> bool:
        """Persist the roster. Returns False when Redis is unavailable."""
        payload = json.dumps([c.to_dict() for c in companions])
        try:
            await self.client.set(self.key(product_id), payload, ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(
                f"Roster autosave failed: {e}",
                extra={"product_id": product_id},
            )
            return False
        return True

    async def load(self, product_id: str) -> list[Companion]:
        """Restore a saved roster; empty list when nothing usable is stored."""
        try:
            raw = await self.client.get(self.key(product_id))
        except RedisError as e:
            logger.warning(
                f"Roster restore failed: {e}",
                extra={"product_id": product_id},
            )
            return []

        if not raw:
            return []

        try:
            return [Companion.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(
                f"Discarding malformed roster snapshot: {e}",
                extra={"product_id": product_id},
            )
            return []

    async def clear(self, product_id: str) -> None:
        try:
            await self.client.delete(self.key(product_id))
        except RedisError as e:
            logger.warning(
                f"Roster cleanup failed: {e}",
                extra={"product_id": product_id},
            )
