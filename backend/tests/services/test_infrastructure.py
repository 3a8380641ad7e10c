"""Infrastructure - session manager error mapping, JSON logging and runtime wiring."""

import json
import logging
from uuid import uuid4

import pytest
from sqlalchemy import text

from slopguess.config import Settings
from slopguess.core.errors import DatabaseError
from slopguess.infrastructure.database import DatabaseSessionManager
from slopguess.infrastructure.embedding_providers import MockEmbeddingProvider
from slopguess.infrastructure.image_storage import LocalImageStorage
from slopguess.infrastructure.observability import JSONFormatter
from slopguess.services.runtime import build_prompt_client, build_runtime


@pytest.fixture
async def manager():
    mgr = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    yield mgr
    await mgr.dispose()


async def test_health_check_succeeds(manager):
    assert await manager.health_check() is True


async def test_sqlalchemy_errors_become_database_error(manager):
    with pytest.raises(DatabaseError) as exc:
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))
    assert exc.value.http_status == 503


def test_json_formatter_surfaces_extra_fields():
    record = logging.LogRecord("slopguess.test", logging.INFO, __file__, 1, "scored", None, None)
    round_id = uuid4()
    record.round_id = round_id
    record.score = 87

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "scored"
    assert payload["level"] == "INFO"
    assert payload["round_id"] == str(round_id)
    assert payload["score"] == 87


def test_prompt_client_needs_a_key():
    assert build_prompt_client(Settings(_env_file=None, anthropic_api_key="")) is None
    assert build_prompt_client(Settings(_env_file=None, anthropic_api_key="sk-ant-x")) is not None


async def test_build_runtime_from_settings(test_session_factory, tmp_path):
    settings = Settings(
        _env_file=None, image_storage_dir=str(tmp_path), scoring_curve="linear",
        max_guess_length=50,
    )
    runtime = build_runtime(settings, test_session_factory)
    try:
        assert isinstance(runtime.round_engine._embeddings, MockEmbeddingProvider)
        assert isinstance(runtime.round_engine._image_store, LocalImageStorage)
        assert runtime.scoring_engine.curve == "linear"
        assert runtime.scoring_engine.max_guess_length == 50
        assert runtime.http_client is not None
    finally:
        await runtime.shutdown()


@pytest.fixture
def exported_anthropic_key(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-from-shell")


async def test_test_runtime_ignores_exported_anthropic_key(exported_anthropic_key, runtime):
    assert runtime.prompt_generator._client is None
