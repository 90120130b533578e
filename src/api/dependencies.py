# src/api/dependencies.py — v1
"""Process-wide wiring: settings → orchestrator, built once per process."""

from __future__ import annotations

from functools import lru_cache

from policylens.analysis.analyzer import RetryingAnalyzer
from policylens.cache.cache_factory import create_cache_store
from policylens.config.settings import Settings
from policylens.extraction.fetcher import HttpDocumentFetcher
from policylens.extraction.html_extractor import HtmlExtractor
from policylens.llm.client_factory import create_llm_client
from policylens.llm.retry import RetryPolicy
from policylens.pipeline.orchestrator import AnalysisOrchestrator
from policylens.storage.artifact_factory import create_artifact_store


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_orchestrator(settings: Settings) -> AnalysisOrchestrator:
    """Assemble the orchestrator and its collaborators from settings."""
    client = create_llm_client(settings.llm_provider, settings.llm_model, settings)
    analyzer = RetryingAnalyzer(
        client=client,
        prompt_template=settings.prompt_template,
        max_tokens=settings.llm_max_tokens,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            base_delay_s=settings.retry_base_delay_s,
            backoff_factor=settings.retry_backoff_factor,
            jitter=settings.retry_jitter,
        ),
        granularity=settings.finding_granularity,
        temperature=settings.llm_temperature,
    )
    return AnalysisOrchestrator(
        cache_store=create_cache_store(settings),
        artifact_store=create_artifact_store(settings),
        fetcher=HttpDocumentFetcher(
            timeout=settings.fetch_timeout_s, max_bytes=settings.fetch_max_bytes,
        ),
        extractor=HtmlExtractor(heading_tags=settings.heading_tags_list),
        analyzer=analyzer,
        artifact_dir=settings.artifact_dir,
        analysis_timeout_s=settings.analysis_timeout_s,
    )


@lru_cache
def get_orchestrator() -> AnalysisOrchestrator:
    return build_orchestrator(get_settings())


def reset_dependency_cache() -> None:
    get_orchestrator.cache_clear()
    get_settings.cache_clear()
