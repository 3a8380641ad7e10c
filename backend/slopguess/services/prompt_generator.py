"""Prompt Generator - generative prompt path with template fallback.

Invariants:
    - Always returns a prompt: any failure of the generative path yields the
      category-aware template with source=templated
    - Without a message client (no API key) the generative path is skipped entirely
    - Model output is cleaned (wrapping quotes) and vetted before it is accepted

Design Decisions:
    - Personas rotate per call so consecutive rounds get different system prompts
    - The last `recent_prompt_count` round prompts are sent as a do-not-repeat list;
      failing to load them only drops the list
"""

import itertools
import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from slopguess.core.domain_types import GeneratedPrompt, PromptSource, WordEntry
from slopguess.core.errors import DatabaseError, ProviderError
from slopguess.core.prompt_templates import (
    PERSONAS,
    assemble_prompt_from_entries,
    build_generation_request,
    clean_generated_prompt,
    is_valid_prompt,
)
from slopguess.core.repository_protocols import MessageClient, SessionFactory
from slopguess.models.round import Round

logger = logging.getLogger(__name__)


def _response_text(response) -> str:
    return "".join(
        getattr(block, "text", "") for block in response.content
        if getattr(block, "type", None) == "text"
    )


class PromptGenerator:
    def __init__(
        self,
        session_factory: SessionFactory,
        client: MessageClient | None = None,
        model: str = "claude-haiku-4-5",
        max_tokens: int = 200,
        temperature: float = 1.0,
        max_prompt_length: int = 500,
        recent_prompt_count: int = 10,
    ):
        self._session_factory = session_factory
        self._client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_prompt_length = max_prompt_length
        self.recent_prompt_count = recent_prompt_count
        self._personas = itertools.cycle(PERSONAS)

    def next_persona(self) -> str:
        return next(self._personas)

    async def generate_prompt_from_words(self, words: Sequence[WordEntry]) -> GeneratedPrompt:
        fallback = GeneratedPrompt(assemble_prompt_from_entries(words), PromptSource.TEMPLATED)
        if not words or self._client is None:
            return fallback

        recent = await self.get_recent_prompts()
        try:
            response = await self._client.create_message(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self.next_persona(),
                messages=[{
                    "role": "user",
                    "content": build_generation_request(words, recent),
                }],
                temperature=self.temperature,
            )
            prompt = clean_generated_prompt(_response_text(response))
        except ProviderError as e:
            logger.warning(
                f"Generative prompt failed, using template: {e.message}",
                extra={"provider": e.provider, "error_code": e.error_type.value},
            )
            return fallback
        except Exception as e:
            logger.error(f"Unexpected generative prompt error, using template: {e}", exc_info=True)
            return fallback

        if not is_valid_prompt(prompt, self.max_prompt_length):
            logger.warning(f"Generated prompt rejected, using template: {prompt[:250]!r}")
            return fallback

        logger.info(
            "Generated prompt accepted",
            extra={"word_count": len(words), "prompt_source": PromptSource.GENERATED.value},
        )
        return GeneratedPrompt(prompt, PromptSource.GENERATED)

    async def get_recent_prompts(self) -> list[str]:
        stmt = (
            select(Round.prompt)
            .order_by(Round.created_at.desc())
            .limit(self.recent_prompt_count)
        )
        try:
            async with self._session_factory() as db:
                return list((await db.execute(stmt)).scalars().all())
        except (SQLAlchemyError, DatabaseError) as e:
            logger.warning(f"Could not load recent prompts: {e}")
            return []
