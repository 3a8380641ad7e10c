"""Settings - defaults, environment overrides and cross-field validation."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from slopguess.config import Settings
from slopguess.core.domain_types import EmbeddingProviderKind, ScoringCurve


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults_run_offline():
    settings = _settings()
    assert settings.embedding_provider == EmbeddingProviderKind.MOCK
    assert settings.difficulty_word_counts == {"easy": 4, "normal": 7, "hard": 10}
    assert settings.default_difficulty == "normal"
    assert settings.scoring_curve == ScoringCurve.CURVED


def test_duration_properties():
    settings = _settings(round_duration_hours=2, round_check_interval_minutes=1)
    assert settings.round_duration == timedelta(hours=2)
    assert settings.round_check_interval == timedelta(minutes=1)
    assert settings.word_cooldown == timedelta(hours=24)


def test_postgres_url_gets_async_driver():
    settings = _settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_default_difficulty_must_be_known():
    with pytest.raises(ValidationError):
        _settings(default_difficulty="nightmare")


def test_word_counts_must_be_positive():
    with pytest.raises(ValidationError):
        _settings(difficulty_word_counts={"normal": 0})


def test_unknown_provider_fails_at_load():
    with pytest.raises(ValidationError):
        _settings(embedding_provider="word2vec")


def test_word_counts_from_environment(monkeypatch):
    monkeypatch.setenv("DIFFICULTY_WORD_COUNTS", '{"tiny": 2, "normal": 7}')
    settings = Settings(_env_file=None)
    assert settings.difficulty_word_counts == {"tiny": 2, "normal": 7}
