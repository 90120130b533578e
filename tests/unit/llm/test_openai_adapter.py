# tests/unit/llm/test_openai_adapter.py — v1
"""Tests for llm/adapters/openai_adapter.py — mocked SDK client."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from policylens.llm.adapters.openai_adapter import OpenAIAdapter
from policylens.llm.base_client import LLMCallError
from policylens.llm.models import Message
from policylens.llm.retry import classify_error

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _completion(content: str | None = "finding-a finding-b", choices: bool = True):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))] if choices else [],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
    )


def _adapter(create: AsyncMock) -> OpenAIAdapter:
    adapter = OpenAIAdapter(model="gpt-4", api_key="sk-test")
    client = MagicMock()
    client.chat.completions.create = create
    adapter._client = client
    return adapter


def _status_error(status: int) -> openai.APIStatusError:
    response = httpx.Response(status, request=_REQUEST)
    return openai.APIStatusError(f"status {status}", response=response, body=None)


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_complete_maps_response(self):
        create = AsyncMock(return_value=_completion())
        adapter = _adapter(create)
        resp = await adapter.complete(
            [Message(role="user", content="prompt")], max_tokens=64, temperature=0.0,
        )
        assert resp.content == "finding-a finding-b"
        assert (resp.input_tokens, resp.output_tokens) == (12, 3)
        assert resp.provider == "openai"
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "gpt-4"
        assert kwargs["max_tokens"] == 64
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_system_prompt_prepended(self):
        create = AsyncMock(return_value=_completion())
        await _adapter(create).complete([Message(role="user", content="u")], system="s")
        assert create.await_args.kwargs["messages"][0] == {"role": "system", "content": "s"}

    @pytest.mark.asyncio
    async def test_null_content_is_empty(self):
        resp = await _adapter(AsyncMock(return_value=_completion(content=None))).complete(
            [Message(role="user", content="u")]
        )
        assert resp.content == ""

    @pytest.mark.asyncio
    async def test_no_choices_raises(self):
        with pytest.raises(LLMCallError, match="no choices"):
            await _adapter(AsyncMock(return_value=_completion(choices=False))).complete(
                [Message(role="user", content="u")]
            )

    @pytest.mark.asyncio
    async def test_sdk_timeout_is_retryable_shape(self):
        create = AsyncMock(side_effect=openai.APITimeoutError(request=_REQUEST))
        with pytest.raises(LLMCallError) as exc_info:
            await _adapter(create).complete([Message(role="user", content="u")])
        assert exc_info.value.timeout is True
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 408, 503, 504])
    async def test_status_replies_are_not_timeouts(self, status):
        create = AsyncMock(side_effect=_status_error(status))
        with pytest.raises(LLMCallError) as exc_info:
            await _adapter(create).complete([Message(role="user", content="u")])
        assert exc_info.value.status_code == status
        assert exc_info.value.timeout is False

    @pytest.mark.asyncio
    async def test_upstream_504_reply_is_terminal(self):
        create = AsyncMock(side_effect=_status_error(504))
        with pytest.raises(LLMCallError) as exc_info:
            await _adapter(create).complete([Message(role="user", content="u")])
        assert classify_error(exc_info.value).retryable is False
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_connection_error_is_terminal_shape(self):
        create = AsyncMock(side_effect=openai.APIConnectionError(request=_REQUEST))
        with pytest.raises(LLMCallError) as exc_info:
            await _adapter(create).complete([Message(role="user", content="u")])
        assert exc_info.value.status_code is None
        assert exc_info.value.timeout is False

    def test_client_built_lazily_without_sdk_retries(self):
        adapter = OpenAIAdapter(api_key="sk-test", timeout_s=5.0)
        assert adapter._client is None
        client = adapter._get_client()
        assert client.max_retries == 0
        assert adapter._get_client() is client

    def test_provider_name(self):
        assert OpenAIAdapter().provider_name == "openai"
