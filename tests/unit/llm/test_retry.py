# tests/unit/llm/test_retry.py — v1
"""Tests for llm/retry.py — classification, attempt budget, deadline."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from policylens.core.errors import AnalysisFailure, AnalysisTimeout
from policylens.llm.base_client import LLMCallError
from policylens.llm.retry import (
    RETRYABLE_STATUSES,
    RetryPolicy,
    classify_error,
    with_retry,
)


class TestClassifyError:
    @pytest.mark.parametrize("status", sorted(RETRYABLE_STATUSES))
    def test_timeout_with_listed_status_is_retryable(self, status):
        verdict = classify_error(LLMCallError("t", status_code=status, timeout=True))
        assert verdict.retryable
        assert verdict.status_code == status

    def test_timeout_with_other_status_is_terminal(self):
        assert not classify_error(LLMCallError("t", status_code=408, timeout=True)).retryable

    def test_listed_status_without_timeout_is_terminal(self):
        assert not classify_error(LLMCallError("e", status_code=503)).retryable

    def test_timeout_without_status_is_terminal(self):
        assert not classify_error(LLMCallError("t", timeout=True)).retryable

    def test_foreign_exception_is_terminal(self):
        verdict = classify_error(RuntimeError("x"))
        assert verdict.kind == "terminal"
        assert verdict.status_code is None


class TestRetryPolicy:
    def test_default_has_no_delay(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.delay_for(0) == 0.0
        assert policy.delay_for(5) == 0.0

    def test_exponential_backoff(self):
        policy = RetryPolicy(base_delay_s=1.0, backoff_factor=2.0)
        assert [policy.delay_for(i) for i in range(3)] == [1.0, 2.0, 4.0]

    def test_jitter_bounds(self):
        policy = RetryPolicy(base_delay_s=1.0, backoff_factor=1.0, jitter=True)
        for _ in range(20):
            assert 0.5 <= policy.delay_for(0) <= 1.5


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        fn = AsyncMock(return_value="ok")
        assert await with_retry(fn, "a", key="v") == "ok"
        fn.assert_awaited_once_with("a", key="v")

    @pytest.mark.asyncio
    async def test_retryable_exhausts_exactly_three_attempts(self):
        fn = AsyncMock(side_effect=LLMCallError("gw", status_code=504, timeout=True))
        with pytest.raises(AnalysisFailure) as exc_info:
            await with_retry(fn)
        assert fn.await_count == 3
        assert exc_info.value.attempts == 3
        assert not isinstance(exc_info.value, AnalysisTimeout)

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self):
        fn = AsyncMock(side_effect=[
            LLMCallError("gw", status_code=502, timeout=True),
            "ok",
        ])
        assert await with_retry(fn) == "ok"
        assert fn.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        LLMCallError("auth", status_code=401),
        LLMCallError("busy", status_code=503, timeout=False),
        LLMCallError("slow", status_code=408, timeout=True),
        ValueError("bad"),
    ])
    async def test_terminal_errors_make_one_attempt(self, error):
        fn = AsyncMock(side_effect=error)
        with pytest.raises(AnalysisFailure) as exc_info:
            await with_retry(fn)
        assert fn.await_count == 1
        assert exc_info.value.last_error is error

    @pytest.mark.asyncio
    async def test_custom_attempt_budget(self):
        fn = AsyncMock(side_effect=LLMCallError("gw", status_code=500, timeout=True))
        with pytest.raises(AnalysisFailure):
            await with_retry(fn, policy=RetryPolicy(max_attempts=5))
        assert fn.await_count == 5

    @pytest.mark.asyncio
    async def test_backoff_sleeps_between_attempts(self):
        fn = AsyncMock(side_effect=LLMCallError("gw", status_code=500, timeout=True))
        policy = RetryPolicy(base_delay_s=0.5, backoff_factor=2.0)
        with patch("policylens.llm.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(AnalysisFailure):
                await with_retry(fn, policy=policy)
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_expired_deadline_makes_no_attempt(self):
        fn = AsyncMock(return_value="ok")
        deadline = asyncio.get_running_loop().time() - 1
        with pytest.raises(AnalysisTimeout):
            await with_retry(fn, deadline=deadline)
        fn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deadline_cancels_running_attempt(self):
        async def slow() -> str:
            await asyncio.sleep(10)
            return "late"

        deadline = asyncio.get_running_loop().time() + 0.05
        with pytest.raises(AnalysisTimeout) as exc_info:
            await with_retry(slow, deadline=deadline)
        assert exc_info.value.attempts == 1

    @pytest.mark.asyncio
    async def test_deadline_stops_backoff(self):
        fn = AsyncMock(side_effect=LLMCallError("gw", status_code=500, timeout=True))
        deadline = asyncio.get_running_loop().time() + 1.0
        policy = RetryPolicy(base_delay_s=60.0)
        with pytest.raises(AnalysisTimeout):
            await with_retry(fn, policy=policy, deadline=deadline)
        assert fn.await_count == 1
