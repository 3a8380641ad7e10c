"""Service test fixtures - async DB, wired services and a FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Services are built with offline providers (hash embeddings, placeholder images,
      in-memory image storage, no prompt model)
    - db_manager patched so readiness probes see the test engine

Design Decisions:
    - StaticPool keeps one connection so every session sees the same in-memory DB
    - The ASGI transport does not run the lifespan; the client fixture installs
      app.state.runtime itself
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

import slopguess.infrastructure.database as db_module
from slopguess.config import Settings
from slopguess.db.base import Base
from slopguess.db.seed_words import seed_word_bank
from slopguess.infrastructure.database import DatabaseSessionManager
from slopguess.infrastructure.embedding_providers import MockEmbeddingProvider
from slopguess.infrastructure.image_providers import MockImageProvider
from slopguess.main import app
from slopguess.models import Round  # noqa: F401  (registers all tables)
from slopguess.services.notifications import NotificationDispatcher
from slopguess.services.prompt_generator import PromptGenerator
from slopguess.services.round_engine import RoundEngine
from slopguess.services.runtime import build_runtime
from slopguess.services.scoring_engine import ScoringEngine
from slopguess.services.word_supply import WordSupply

from tests.services.fakes import ADMIN_KEY, FakeImageStorage, RecordingSink

WORD_COUNTS = {"easy": 4, "normal": 7, "hard": 10}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def seeded(test_session_factory):
    """Load the full seed word bank."""
    return await seed_word_bank(test_session_factory)


# -- Services ------------------------------------------------------------------

@pytest.fixture
def embedding_provider():
    return MockEmbeddingProvider()


@pytest.fixture
def image_store():
    return FakeImageStorage()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def notifications(sink):
    return NotificationDispatcher(sink)


@pytest.fixture
def word_supply(test_session_factory):
    return WordSupply(test_session_factory, WORD_COUNTS)


@pytest.fixture
def prompt_generator(test_session_factory):
    return PromptGenerator(test_session_factory)


@pytest.fixture
def make_round_engine(test_session_factory, word_supply, prompt_generator, image_store, embedding_provider):
    """Factory so tests can swap the image provider or clock."""
    def _make(image_provider=None, **kwargs):
        return RoundEngine(
            test_session_factory,
            word_supply,
            prompt_generator,
            image_provider or MockImageProvider(),
            image_store,
            embedding_provider,
            **kwargs,
        )
    return _make


@pytest.fixture
def round_engine(make_round_engine):
    return make_round_engine()


@pytest.fixture
def scoring_engine(test_session_factory, embedding_provider, notifications):
    return ScoringEngine(test_session_factory, embedding_provider, notifications)


@pytest.fixture
async def active_round(seeded, round_engine):
    return await round_engine.create_and_activate_round()


# -- HTTP ----------------------------------------------------------------------

@pytest.fixture
async def runtime(test_session_factory, image_store, notifications):
    settings = Settings(
        _env_file=None,
        admin_api_key=ADMIN_KEY,
        anthropic_api_key="",
        openai_api_key="",
    )
    rt = build_runtime(
        settings,
        test_session_factory,
        embedding_provider=MockEmbeddingProvider(),
        image_provider=MockImageProvider(),
        image_store=image_store,
        notifications=notifications,
    )
    yield rt
    await rt.shutdown()


@pytest.fixture
async def client(test_engine, test_session_factory, runtime):
    """FastAPI test client wired to the test runtime and database."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager
    app.state.runtime = runtime

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.state.runtime = None
    db_module.db_manager = original_manager
