"""
Test configuration and fixtures for the shortener.
Every test gets its own SQLite file and an in-memory cache, so tests are
isolated from each other and need no running Redis.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from main import create_app
from shortlink_app.background import BackgroundTasks
from shortlink_app.cache import InMemoryCache
from shortlink_app.config import Settings
from shortlink_app.database.connection import create_engine, init_db
from shortlink_app.storage import SQLAlchemyUrlStore

ADMIN_AUTH = ("admin", "test-secret")


@pytest.fixture(scope="function")
def settings(tmp_path):
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        base_url="http://sho.rt",
        cache_backend="memory",
        shorten_burst=1000,
        redirect_burst=1000,
        admin_username=ADMIN_AUTH[0],
        admin_password=ADMIN_AUTH[1],
    )


@pytest.fixture(scope="function")
def client(settings):
    """
    Test client around a fresh app.
    Entering the client runs the lifespan (tables, cache, click recorder).
    """
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def flush_clicks(client):
    """Call to block until the click recorder has written everything queued so far"""
    def flush():
        client.portal.call(client.app.state.click_recorder.join)
    return flush


@pytest_asyncio.fixture(scope="function")
async def store(settings):
    engine = create_engine(settings)
    await init_db(engine)
    url_store = SQLAlchemyUrlStore(engine)
    yield url_store
    await url_store.close()


@pytest.fixture(scope="function")
def cache():
    return InMemoryCache()


@pytest_asyncio.fixture(scope="function")
async def tasks():
    background = BackgroundTasks()
    yield background
    await background.drain(timeout=1)


@pytest.fixture
def admin_auth():
    return ADMIN_AUTH
