"""Resilient Anthropic Client - retry policy and error mapping around messages.create."""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from slopguess.core.errors import ProviderError, ProviderErrorType
from slopguess.infrastructure.anthropic_client import ResilientAnthropicClient

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls, status, headers=None):
    response = httpx.Response(status, request=_REQUEST, headers=headers or {})
    return cls(f"status {status}", response=response, body=None)


class _FakeMessages:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(outcomes, max_retries=2):
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", max_retries=max_retries, base_delay_ms=1, max_delay_ms=1,
    )
    messages = _FakeMessages(outcomes)
    client.client = SimpleNamespace(messages=messages)
    return client, messages


def _ok():
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text="a prompt")],
        usage=SimpleNamespace(input_tokens=10, output_tokens=5),
    )


async def _call(client, **overrides):
    kwargs = {
        "model": "claude-haiku-4-5",
        "max_tokens": 100,
        "system": "persona",
        "messages": [{"role": "user", "content": "words"}],
    }
    kwargs.update(overrides)
    return await client.create_message(**kwargs)


async def test_success_passes_arguments_through():
    client, messages = _client([_ok()])
    response = await _call(client, temperature=0.7)
    assert response.content[0].text == "a prompt"
    assert messages.calls[0]["temperature"] == 0.7
    assert messages.calls[0]["system"] == "persona"


async def test_temperature_omitted_when_not_given():
    client, messages = _client([_ok()])
    await _call(client)
    assert "temperature" not in messages.calls[0]


async def test_rate_limit_is_retried():
    client, messages = _client([_status_error(anthropic.RateLimitError, 429), _ok()])
    await _call(client)
    assert len(messages.calls) == 2


async def test_rate_limit_exhausted():
    client, messages = _client(
        [_status_error(anthropic.RateLimitError, 429, {"retry-after": "0"})] * 2,
        max_retries=1,
    )
    with pytest.raises(ProviderError) as exc:
        await _call(client)
    assert exc.value.error_type == ProviderErrorType.RATE_LIMIT
    assert len(messages.calls) == 2


async def test_server_error_is_retried_then_mapped():
    client, messages = _client(
        [_status_error(anthropic.InternalServerError, 500)] * 3, max_retries=2,
    )
    with pytest.raises(ProviderError) as exc:
        await _call(client)
    assert exc.value.error_type == ProviderErrorType.SERVER_ERROR
    assert len(messages.calls) == 3


async def test_overloaded_is_retried():
    client, messages = _client([_status_error(anthropic.APIStatusError, 529), _ok()])
    await _call(client)
    assert len(messages.calls) == 2


async def test_connection_error_maps_to_transport():
    client, _ = _client([anthropic.APIConnectionError(request=_REQUEST)] * 2, max_retries=1)
    with pytest.raises(ProviderError) as exc:
        await _call(client)
    assert exc.value.error_type == ProviderErrorType.TRANSPORT


@pytest.mark.parametrize("cls,status,error_type", [
    (anthropic.BadRequestError, 400, ProviderErrorType.BAD_REQUEST),
    (anthropic.AuthenticationError, 401, ProviderErrorType.AUTH),
    (anthropic.PermissionDeniedError, 403, ProviderErrorType.AUTH),
])
async def test_client_errors_fail_fast(cls, status, error_type):
    client, messages = _client([_status_error(cls, status)])
    with pytest.raises(ProviderError) as exc:
        await _call(client)
    assert exc.value.error_type == error_type
    assert len(messages.calls) == 1
