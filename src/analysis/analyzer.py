# src/analysis/analyzer.py — v1
"""Retrying analyzer: turns two extracted documents into compliance findings.

Formats one prompt embedding both documents, sends it to the LLM through
llm.retry.with_retry, and splits the reply into findings. Stateless across
calls; the only side effect is the LLM request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Literal

from policylens.core.errors import AnalysisFailure
from policylens.core.models import ExtractedContent
from policylens.llm.base_client import BaseLLMClient
from policylens.llm.models import LLMResponse, Message
from policylens.llm.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)

FindingGranularity = Literal["tokens", "lines"]


def build_prompt(
    template: str, policy: ExtractedContent, target: ExtractedContent
) -> str:
    """Fill the template's {target} and {policy} insertion points."""
    return template.format(target=target.render(), policy=policy.render())


def split_findings(text: str, granularity: FindingGranularity = "tokens") -> list[str]:
    """Split an LLM reply into findings.

    "tokens" splits on any whitespace run (one finding per token); "lines"
    keeps each non-empty trimmed line as one finding.
    """
    if granularity == "lines":
        return [line.strip() for line in text.splitlines() if line.strip()]
    return text.split()


class RetryingAnalyzer:
    """Wraps a single LLM completion with bounded, condition-aware retry.

    Args:
        client: LLM client used for the completion.
        prompt_template: Format string with {target} and {policy} fields.
        max_tokens: Output token budget per call.
        retry_policy: Attempt budget and backoff (default: 3 attempts, no delay).
        granularity: How the reply is split into findings.
        temperature: Sampling temperature passed to the client.
    """

    def __init__(
        self,
        client: BaseLLMClient,
        prompt_template: str,
        max_tokens: int = 1024,
        retry_policy: RetryPolicy | None = None,
        granularity: FindingGranularity = "tokens",
        temperature: float = 0.2,
    ) -> None:
        self._client = client
        self._template = prompt_template
        self._max_tokens = max_tokens
        self._retry_policy = retry_policy or RetryPolicy()
        self._granularity = granularity
        self._temperature = temperature

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def analyze(
        self,
        policy_content: ExtractedContent,
        target_content: ExtractedContent,
        timeout_s: float | None = None,
        deadline: float | None = None,
    ) -> list[str]:
        """Return findings for target_content measured against policy_content.

        Args:
            policy_content: Extracted policy document.
            target_content: Extracted target (webpage) document.
            timeout_s: Relative time budget for all attempts.
            deadline: Absolute loop.time() deadline; wins over timeout_s.

        Raises:
            AnalysisFailure: On a terminal error or exhausted retries. Also
                raised before any call when the template cannot be filled.
            AnalysisTimeout: If the deadline expires first.
        """
        try:
            prompt = build_prompt(self._template, policy_content, target_content)
        except (KeyError, IndexError, ValueError) as e:
            logger.error("Prompt template cannot be filled: %r", e)
            raise AnalysisFailure("Failed to build analysis prompt", last_error=e) from e
        if deadline is None and timeout_s is not None:
            deadline = asyncio.get_running_loop().time() + timeout_s

        logger.debug(
            "Analyzing %d policy / %d target segments (prompt %d chars)",
            len(policy_content), len(target_content), len(prompt),
        )
        response: LLMResponse = await with_retry(
            self._client.complete,
            [Message(role="user", content=prompt)],
            policy=self._retry_policy,
            deadline=deadline,
            operation="analysis",
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        findings = split_findings(response.content, self._granularity)
        logger.info(
            "Analysis produced %d findings (%d output tokens, %d ms)",
            len(findings), response.output_tokens, response.latency_ms,
        )
        return findings
