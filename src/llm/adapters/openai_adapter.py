# src/llm/adapters/openai_adapter.py — v1
"""OpenAI chat adapter implementing BaseLLMClient.

Uses the official openai SDK. SDK errors are mapped to LLMCallError:
  - APITimeoutError         -> timeout, status 504 (no upstream answer in time)
  - APIStatusError          -> upstream status; timeout if 408 or 504
  - APIConnectionError      -> non-timeout, no status
"""

from __future__ import annotations

import time
from typing import Any

from policylens.llm.base_client import BaseLLMClient, LLMCallError
from policylens.llm.models import LLMResponse, Message


class OpenAIAdapter(BaseLLMClient):
    """OpenAI GPT adapter."""

    def __init__(
        self,
        model: str = "gpt-4",
        api_key: str = "",
        timeout_s: float | None = None,
        max_retries: int = 0,
        **kwargs: Any,
    ):
        self._model = model
        self._api_key = api_key
        self._timeout_s = timeout_s
        # SDK-level retries stay off: retry policy lives in llm.retry.
        self._max_retries = max_retries
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            import openai

            kwargs: dict[str, Any] = {
                "api_key": self._api_key or None,
                "max_retries": self._max_retries,
            }
            if self._timeout_s is not None:
                kwargs["timeout"] = self._timeout_s
            self._client = openai.AsyncOpenAI(**kwargs)
        return self._client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> LLMResponse:
        import openai

        client = self._get_client()
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})

        t0 = time.monotonic()
        try:
            resp = await client.chat.completions.create(
                model=self._model,
                messages=oai_messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APITimeoutError as e:
            raise LLMCallError(str(e), status_code=504, timeout=True) from e
        except openai.APIStatusError as e:
            # A status reply means the transport completed, even for 504.
            raise LLMCallError(str(e), status_code=e.status_code, timeout=False) from e
        except openai.APIConnectionError as e:
            raise LLMCallError(str(e)) from e
        latency = int((time.monotonic() - t0) * 1000)

        if not resp.choices:
            raise LLMCallError("OpenAI returned no choices")
        choice = resp.choices[0]
        usage = resp.usage
        return LLMResponse(
            content=choice.message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider="openai",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "openai"
