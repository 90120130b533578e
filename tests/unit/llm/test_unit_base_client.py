# tests/unit/llm/test_unit_base_client.py — v1
"""Tests for llm/base_client.py — BaseLLMClient ABC and LLMCallError."""

from __future__ import annotations

import pytest

from policylens.llm.base_client import BaseLLMClient, LLMCallError


class TestBaseLLMClient:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseLLMClient()  # type: ignore[abstract]

    def test_has_required_methods(self):
        assert hasattr(BaseLLMClient, "complete")
        assert hasattr(BaseLLMClient, "provider_name")


class TestLLMCallError:
    def test_defaults(self):
        e = LLMCallError("boom")
        assert str(e) == "boom"
        assert e.status_code is None
        assert e.timeout is False

    def test_carries_classification_fields(self):
        e = LLMCallError("gateway", status_code=504, timeout=True)
        assert (e.status_code, e.timeout) == (504, True)
