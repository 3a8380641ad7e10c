"""Runtime wiring - builds every service once per process from Settings.

Invariants:
    - Providers are resolved here, at startup; misconfiguration raises before serving
    - All services share one session factory and one notification dispatcher
"""

from dataclasses import dataclass

import httpx

from slopguess.config import Settings
from slopguess.core.repository_protocols import (
    EmbeddingProvider, ImageProvider, ImageStore, MessageClient, SessionFactory,
)
from slopguess.infrastructure.anthropic_client import ResilientAnthropicClient
from slopguess.infrastructure.embedding_providers import build_embedding_provider
from slopguess.infrastructure.image_providers import build_image_provider
from slopguess.infrastructure.image_storage import LocalImageStorage
from slopguess.services.notifications import NotificationDispatcher
from slopguess.services.prompt_generator import PromptGenerator
from slopguess.services.round_engine import RoundEngine
from slopguess.services.round_scheduler import RoundScheduler
from slopguess.services.scoring_engine import ScoringEngine
from slopguess.services.word_supply import WordSupply


@dataclass
class GameRuntime:
    settings: Settings
    word_supply: WordSupply
    prompt_generator: PromptGenerator
    round_engine: RoundEngine
    scoring_engine: ScoringEngine
    scheduler: RoundScheduler
    notifications: NotificationDispatcher
    http_client: httpx.AsyncClient | None = None

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        await self.notifications.drain()
        if self.http_client is not None:
            await self.http_client.aclose()


def build_prompt_client(settings: Settings) -> MessageClient | None:
    if not settings.anthropic_api_key.strip():
        return None
    return ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )


def build_runtime(
    settings: Settings,
    session_factory: SessionFactory,
    *,
    embedding_provider: EmbeddingProvider | None = None,
    image_provider: ImageProvider | None = None,
    image_store: ImageStore | None = None,
    prompt_client: MessageClient | None = None,
    notifications: NotificationDispatcher | None = None,
) -> GameRuntime:
    """Assemble services; keyword overrides replace the settings-selected collaborators."""
    http_client = None
    if image_store is None:
        http_client = httpx.AsyncClient(timeout=settings.openai_timeout_seconds)
        image_store = LocalImageStorage(
            settings.image_storage_dir, settings.image_public_prefix, http_client,
        )
    embedding_provider = embedding_provider or build_embedding_provider(settings)
    image_provider = image_provider or build_image_provider(settings)
    prompt_client = prompt_client or build_prompt_client(settings)
    notifications = notifications or NotificationDispatcher()

    word_supply = WordSupply(
        session_factory,
        settings.difficulty_word_counts,
        lookback_rounds=settings.combination_lookback_rounds,
        max_overlap=settings.combination_max_overlap,
        max_attempts=settings.combination_max_attempts,
        cooldown=settings.word_cooldown,
    )
    prompt_generator = PromptGenerator(
        session_factory,
        prompt_client,
        model=settings.prompt_model,
        max_tokens=settings.prompt_max_tokens,
        temperature=settings.prompt_temperature,
        max_prompt_length=settings.prompt_max_length,
        recent_prompt_count=settings.recent_prompt_count,
    )
    round_engine = RoundEngine(
        session_factory,
        word_supply,
        prompt_generator,
        image_provider,
        image_store,
        embedding_provider,
        default_difficulty=settings.default_difficulty,
        image_quality=settings.image_quality,
    )
    scoring_engine = ScoringEngine(
        session_factory,
        embedding_provider,
        notifications,
        curve=settings.scoring_curve,
        max_guess_length=settings.max_guess_length,
    )
    scheduler = RoundScheduler(
        round_engine,
        settings.round_duration,
        settings.round_check_interval,
        notifications,
    )
    return GameRuntime(
        settings=settings,
        word_supply=word_supply,
        prompt_generator=prompt_generator,
        round_engine=round_engine,
        scoring_engine=scoring_engine,
        scheduler=scheduler,
        notifications=notifications,
        http_client=http_client,
    )
