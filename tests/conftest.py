import fakeredis
import pytest_asyncio

from mixaid.core.card_store import CardStore
from mixaid.core.query_engine import QueryEngine

NAMESPACE = "test-mix-aid:store"


@pytest_asyncio.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store(redis_client):
    return CardStore(redis_client, namespace=NAMESPACE)


@pytest_asyncio.fixture
async def engine(store):
    return QueryEngine(store)
