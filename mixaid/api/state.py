"""Shared application state (injected into routes)."""
import logging

import redis.asyncio as redis
from fastapi import Request

from mixaid.config import KEY_NAMESPACE, REDIS_URL, SAVE_RETRIES
from mixaid.core.card_store import CardStore
from mixaid.core.query_engine import QueryEngine

logger = logging.getLogger(__name__)


class AppState:
    """Holds the Redis client and the services built on it."""

    def __init__(self, client, namespace: str = KEY_NAMESPACE) -> None:
        self.client = client
        self.card_store = CardStore(client, namespace=namespace, retries=SAVE_RETRIES)
        self.query_engine = QueryEngine(self.card_store)

    @classmethod
    def open(cls, url: str = REDIS_URL) -> "AppState":
        client = redis.from_url(url, decode_responses=True)
        logger.info("Redis client created for %s", url)
        return cls(client)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("Redis client closed")


def get_state(request: Request) -> AppState:
    return request.app.state.mixaid
