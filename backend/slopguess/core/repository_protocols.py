"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Providers are resolved once from settings into objects satisfying these protocols
    - Every embedding provider implements embed_batch (sequential where the API has no batch)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Awaitable, Callable, Protocol, Sequence

from slopguess.core.domain_types import (
    EmbeddingResult, GeneratedImage, ImageQuality, NotificationEvent,
)


class EmbeddingProvider(Protocol):
    """Text -> fixed-dimension vector."""
    name: str
    dimensions: int

    async def embed(self, text: str) -> EmbeddingResult: ...
    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...


class ImageProvider(Protocol):
    """Prompt -> image (URL or inline bytes)."""
    name: str

    async def generate(
        self, prompt: str, quality: ImageQuality | None = None,
    ) -> GeneratedImage: ...


class ImageStore(Protocol):
    """Durable image storage returning a stable public reference."""
    async def persist(self, image: GeneratedImage) -> str: ...


class MessageClient(Protocol):
    """Subset of the resilient Anthropic client used for prompt rewriting."""
    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list[dict],
        temperature: float | None = None,
        context: dict | None = None,
    ) -> Any: ...


NotificationSink = Callable[[NotificationEvent], Awaitable[None]]

# Zero-argument callable yielding an AsyncSession as an async context manager:
# an async_sessionmaker or DatabaseSessionManager.session both qualify.
SessionFactory = Callable[[], AbstractAsyncContextManager[Any]]
