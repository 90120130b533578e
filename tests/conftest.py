# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides sample HTML documents, a stub fetcher, mock LLM clients and temp
directories. Only the Redis fixture needs Docker; it skips when the daemon
is unreachable.
"""

from __future__ import annotations

import time
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from policylens.analysis.analyzer import RetryingAnalyzer
from policylens.cache.memory_store import InMemoryCacheStore
from policylens.extraction.base_extractor import BaseDocumentFetcher, DocumentFetchError
from policylens.extraction.html_extractor import HtmlExtractor
from policylens.llm.models import LLMResponse
from policylens.pipeline.orchestrator import AnalysisOrchestrator
from policylens.storage.local_store import LocalArtifactStore

POLICY_URL = "https://example.com/policy"
WEBPAGE_URL = "https://example.com/landing"

TEST_PROMPT = "Webpage:\n{target}\n\nPolicy:\n{policy}\n"


class StubFetcher(BaseDocumentFetcher):
    """In-memory fetcher keyed by reference; unknown references fail."""

    def __init__(self, documents: dict[str, bytes | str]) -> None:
        self.documents = documents
        self.calls: list[str] = []

    async def fetch(self, reference: str) -> bytes:
        self.calls.append(reference)
        if reference not in self.documents:
            raise DocumentFetchError(reference, "HTTP 404")
        doc = self.documents[reference]
        return doc.encode("utf-8") if isinstance(doc, str) else doc


def make_llm_response(content: str) -> LLMResponse:
    return LLMResponse(
        content=content,
        input_tokens=100,
        output_tokens=10,
        model="gpt-4",
        provider="mock",
        latency_ms=5,
    )


# === FIXTURES: Sample documents ===


@pytest.fixture
def policy_html() -> str:
    return "<html><body><p>No fees after day 30.</p></body></html>"


@pytest.fixture
def target_html() -> str:
    return "<html><body><p>Fees apply indefinitely.</p></body></html>"


@pytest.fixture
def stub_fetcher(policy_html: str, target_html: str) -> StubFetcher:
    return StubFetcher({POLICY_URL: policy_html, WEBPAGE_URL: target_html})


@pytest.fixture
def fetcher_factory():
    """Build a StubFetcher over arbitrary documents."""
    return StubFetcher


@pytest.fixture
def llm_response_factory():
    return make_llm_response


# === FIXTURES: Mock LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    return make_llm_response("Fee-duration-mismatch")


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "mock"
    return client


@pytest.fixture
def analyzer(mock_llm_client: AsyncMock) -> RetryingAnalyzer:
    return RetryingAnalyzer(client=mock_llm_client, prompt_template=TEST_PROMPT)


# === FIXTURES: Temp dirs / stores ===


@pytest.fixture
def tmp_artifact_dir(tmp_path: Path) -> Path:
    out = tmp_path / "artifacts"
    out.mkdir()
    return out


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


@pytest.fixture
def orchestrator(
    stub_fetcher: StubFetcher, analyzer: RetryingAnalyzer, tmp_artifact_dir: Path,
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        cache_store=InMemoryCacheStore(),
        artifact_store=LocalArtifactStore(tmp_artifact_dir),
        fetcher=stub_fetcher,
        extractor=HtmlExtractor(),
        analyzer=analyzer,
    )


# === INTEGRATION: Docker-backed services ===

REDIS_IMAGE = "redis:7-alpine"
REDIS_INTERNAL_PORT = 6379


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries.

    With docker-outside-of-docker the test process reaches containers via
    their bridge IP, not localhost.
    """
    for _ in range(max_attempts):
        wrapped = container.get_wrapped_container()
        wrapped.reload()
        networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
        for net_info in networks.values():
            ip = net_info.get("IPAddress", "")
            if ip:
                return ip
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


@pytest.fixture(scope="session")
def redis_url():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=30)

    ip = _get_container_bridge_ip(container)
    yield f"redis://{ip}:{REDIS_INTERNAL_PORT}/0"
    container.stop()
