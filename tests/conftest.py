import os
os.environ['TEST_DB_URL'] = 'sqlite:///test.db'
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from neo_feed.main import app, feed_cache, detail_cache
from neo_feed import models
from neo_feed.database import engine


@pytest.fixture(autouse=True)
def clear_caches():
    feed_cache.clear()
    detail_cache.clear()
    yield
    feed_cache.clear()
    detail_cache.clear()


@pytest.fixture
def fresh_db():
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)


@pytest_asyncio.fixture
async def client(fresh_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
