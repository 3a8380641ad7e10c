"""Prompt Generator - generative path, vetting and template fallback."""

from contextlib import asynccontextmanager

from sqlalchemy.exc import OperationalError

from slopguess.core.domain_types import PromptSource, WordEntry, WordId
from slopguess.core.errors import ProviderError, ProviderErrorType
from slopguess.core.prompt_templates import PERSONAS, assemble_prompt_from_entries
from slopguess.services.prompt_generator import PromptGenerator

from tests.services.fakes import FakeMessageClient

WORDS = [
    WordEntry(WordId(1), "fluffy", "adjectives"),
    WordEntry(WordId(2), "octopus", "animals"),
    WordEntry(WordId(3), "juggling", "actions"),
    WordEntry(WordId(4), "library", "settings"),
]
TEMPLATED = assemble_prompt_from_entries(WORDS)
GOOD_REPLY = "A fluffy octopus is juggling teacups between tall shelves in a quiet library."


@asynccontextmanager
async def _broken_session():
    raise OperationalError("SELECT 1", {}, Exception("database is down"))
    yield


async def test_no_client_uses_template(test_session_factory):
    generator = PromptGenerator(test_session_factory)
    result = await generator.generate_prompt_from_words(WORDS)
    assert result.prompt == TEMPLATED
    assert result.source == PromptSource.TEMPLATED


async def test_generated_prompt_accepted(test_session_factory):
    client = FakeMessageClient([f'"{GOOD_REPLY}"'])
    generator = PromptGenerator(test_session_factory, client, model="test-model")

    result = await generator.generate_prompt_from_words(WORDS)

    assert result.prompt == GOOD_REPLY
    assert result.source == PromptSource.GENERATED
    call = client.calls[0]
    assert call["model"] == "test-model"
    assert call["system"] == PERSONAS[0]
    assert "octopus (animals)" in call["messages"][0]["content"]


async def test_provider_failure_falls_back(test_session_factory):
    client = FakeMessageClient([
        ProviderError("anthropic", ProviderErrorType.RATE_LIMIT, "slow down"),
    ])
    generator = PromptGenerator(test_session_factory, client)

    result = await generator.generate_prompt_from_words(WORDS)

    assert result.prompt == TEMPLATED
    assert result.source == PromptSource.TEMPLATED


async def test_unexpected_client_error_falls_back(test_session_factory):
    client = FakeMessageClient([RuntimeError("boom")])
    generator = PromptGenerator(test_session_factory, client)

    result = await generator.generate_prompt_from_words(WORDS)

    assert result.prompt == TEMPLATED
    assert result.source == PromptSource.TEMPLATED
    assert len(client.calls) == 1


async def test_meta_reply_falls_back(test_session_factory):
    client = FakeMessageClient(["Here is your prompt: an octopus in a library"])
    generator = PromptGenerator(test_session_factory, client)
    result = await generator.generate_prompt_from_words(WORDS)
    assert result.source == PromptSource.TEMPLATED


async def test_overlong_reply_falls_back(test_session_factory):
    client = FakeMessageClient(["an octopus " * 60])
    generator = PromptGenerator(test_session_factory, client, max_prompt_length=500)
    result = await generator.generate_prompt_from_words(WORDS)
    assert result.source == PromptSource.TEMPLATED


async def test_personas_rotate(test_session_factory):
    client = FakeMessageClient([GOOD_REPLY, GOOD_REPLY])
    generator = PromptGenerator(test_session_factory, client)

    await generator.generate_prompt_from_words(WORDS)
    await generator.generate_prompt_from_words(WORDS)

    assert [c["system"] for c in client.calls] == list(PERSONAS[:2])


async def test_recent_prompts_are_sent(active_round, test_session_factory):
    client = FakeMessageClient([GOOD_REPLY])
    generator = PromptGenerator(test_session_factory, client)

    await generator.generate_prompt_from_words(WORDS)

    assert active_round.prompt in client.calls[0]["messages"][0]["content"]


async def test_recent_prompts_degrade_to_empty():
    generator = PromptGenerator(_broken_session)
    assert await generator.get_recent_prompts() == []
