"""Embedding Providers - deterministic hash embeddings and the OpenAI embeddings API.

Invariants:
    - build_embedding_provider resolves the configured kind once, at startup
    - Selecting OPENAI without an API key raises ConfigurationError immediately
    - Batch results come back in input order (the API response is sorted by index)
    - OpenAI batches are chunked at MAX_BATCH_SIZE inputs
"""

import logging
from typing import Sequence

import openai
from openai import AsyncOpenAI

from slopguess.config import Settings
from slopguess.core.domain_types import EmbeddingProviderKind, EmbeddingResult
from slopguess.core.errors import ConfigurationError, GuessValidationError
from slopguess.core.hash_embedding import DEFAULT_DIMENSIONS, hash_embedding
from slopguess.core.repository_protocols import EmbeddingProvider
from slopguess.infrastructure.openai_client import build_openai_client, map_openai_error

logger = logging.getLogger(__name__)

OPENAI_EMBEDDING_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}
MAX_BATCH_SIZE = 2048


class MockEmbeddingProvider:
    """Offline provider backed by core.hash_embedding."""

    name = "mock"
    model = "mock-hash-v1"

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS):
        self.dimensions = dimensions

    async def embed(self, text: str) -> EmbeddingResult:
        vector = hash_embedding(text, self.dimensions)
        return EmbeddingResult(vector, self.dimensions, self.name, self.model)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        return [hash_embedding(t, self.dimensions) for t in texts]


class OpenAIEmbeddingProvider:
    """Live provider calling the OpenAI embeddings endpoint."""

    name = "openai"

    def __init__(self, client: AsyncOpenAI, model: str = "text-embedding-3-small"):
        self._client = client
        self.model = model
        self.dimensions = OPENAI_EMBEDDING_DIMENSIONS.get(model, 1536)

    async def embed(self, text: str) -> EmbeddingResult:
        if not text or not text.strip():
            raise GuessValidationError("Cannot embed empty text")
        vectors = await self._request([text])
        return EmbeddingResult(vectors[0], len(vectors[0]), self.name, self.model)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        vectors: list[list[float]] = []
        for start in range(0, len(texts), MAX_BATCH_SIZE):
            vectors.extend(await self._request(list(texts[start:start + MAX_BATCH_SIZE])))
        return vectors

    async def _request(self, inputs: list[str]) -> list[list[float]]:
        try:
            response = await self._client.embeddings.create(
                model=self.model, input=inputs, encoding_format="float",
            )
        except openai.OpenAIError as e:
            mapped = map_openai_error(e, "openai_embeddings")
            logger.error(
                f"Embedding request failed: {mapped.message}",
                extra={"provider": self.name, "error_code": mapped.error_type.value},
            )
            raise mapped from e
        ordered = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in ordered]


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    if settings.embedding_provider == EmbeddingProviderKind.OPENAI:
        if not settings.openai_api_key.strip():
            raise ConfigurationError(
                "EMBEDDING_PROVIDER=openai requires OPENAI_API_KEY to be set",
            )
        client = build_openai_client(
            settings.openai_api_key,
            settings.openai_max_retries,
            settings.openai_timeout_seconds,
        )
        return OpenAIEmbeddingProvider(client, settings.embedding_model)
    return MockEmbeddingProvider(settings.mock_embedding_dimensions)
