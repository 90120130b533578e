# tests/unit/llm/test_client_factory.py — v1
"""Tests for llm/client_factory.py."""

from __future__ import annotations

import pytest

from policylens.config.settings import Settings
from policylens.llm.adapters.openai_adapter import OpenAIAdapter
from policylens.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
)


class TestCreateLLMClient:
    def test_openai(self):
        client = create_llm_client("openai", "gpt-4")
        assert isinstance(client, OpenAIAdapter)
        assert client._model == "gpt-4"

    def test_api_key_from_settings(self):
        s = Settings(_env_file=None, openai_api_key="sk-from-settings")
        client = create_llm_client("openai", "gpt-4", settings=s)
        assert client._api_key == "sk-from-settings"

    def test_explicit_api_key_wins(self):
        s = Settings(_env_file=None, openai_api_key="sk-from-settings")
        client = create_llm_client("openai", "gpt-4", settings=s, api_key="sk-explicit")
        assert client._api_key == "sk-explicit"

    def test_unsupported_provider(self):
        with pytest.raises(UnsupportedProviderError, match="Available: openai"):
            create_llm_client("nope", "m")
