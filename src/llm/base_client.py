# src/llm/base_client.py — v1
"""Abstract LLM client interface and its classified error type."""

from __future__ import annotations

from abc import ABC, abstractmethod

from policylens.llm.models import LLMResponse, Message


class LLMCallError(Exception):
    """Provider-neutral failure of a completion call.

    Adapters translate SDK exceptions into this type so retry decisions
    never depend on a specific SDK's exception hierarchy.

    Attributes:
        status_code: Upstream HTTP status, if any was reported.
        timeout: True when the failure was a transport-level timeout.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        timeout: bool = False,
    ) -> None:
        self.status_code = status_code
        self.timeout = timeout
        super().__init__(message)


class BaseLLMClient(ABC):
    """Unified interface for LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> LLMResponse:
        """Text completion.

        Raises:
            LLMCallError: On any provider failure.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. openai)."""
