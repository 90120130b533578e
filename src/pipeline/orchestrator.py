# src/pipeline/orchestrator.py — v1
"""Analysis orchestrator — one compliance request from references to findings.

Per-request state machine:

    RECEIVED -> KEY_DERIVED -> CACHE_HIT -> RESPONDING -> RESPONDED
                            -> CACHE_MISS -> FETCHING -> EXTRACTING
                               -> ANALYZING -> PERSISTING -> REGISTERING
                               -> RESPONDING -> RESPONDED

Any failure is terminal and surfaces as a core.errors.PipelineError. A
failed cache read is not a failure: it falls through to recomputation.
Concurrent misses for the same key share one computation (single-flight).
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from typing import TYPE_CHECKING

from policylens.cache.base_cache_store import CacheKeyNotFound
from policylens.cache.keys import artifact_digest, artifact_name, derive_cache_key
from policylens.cache.models import CacheEntry
from policylens.cache.single_flight import SingleFlight
from policylens.core.errors import FetchFailure, InvalidInput, PersistenceFailure
from policylens.core.models import AnalysisResult, ExtractedContent
from policylens.extraction.base_extractor import DocumentFetchError
from policylens.logging.context import set_key_context, set_stage

if TYPE_CHECKING:
    from policylens.analysis.analyzer import RetryingAnalyzer
    from policylens.cache.base_cache_store import BaseCacheStore
    from policylens.extraction.base_extractor import BaseDocumentFetcher, BaseExtractor
    from policylens.storage.base_artifact_store import BaseArtifactStore

logger = logging.getLogger(__name__)


class RequestState(str, enum.Enum):
    RECEIVED = "received"
    KEY_DERIVED = "key_derived"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    PERSISTING = "persisting"
    REGISTERING = "registering"
    RESPONDING = "responding"
    RESPONDED = "responded"
    FAILED = "failed"


class AnalysisOrchestrator:
    """Composes cache, fetcher, extractor, analyzer and artifact store.

    Args:
        cache_store: Maps cache keys to artifact references.
        artifact_store: Durable storage for findings.
        fetcher: Resolves document references to raw bytes.
        extractor: Turns raw bytes into ExtractedContent.
        analyzer: Produces findings from two extracted documents.
        artifact_dir: Directory (or key prefix) for artifacts.
        analysis_timeout_s: Deadline for the analyzer, retries included.
    """

    def __init__(
        self,
        cache_store: BaseCacheStore,
        artifact_store: BaseArtifactStore,
        fetcher: BaseDocumentFetcher,
        extractor: BaseExtractor,
        analyzer: RetryingAnalyzer,
        artifact_dir: str = "asset",
        analysis_timeout_s: float | None = None,
    ) -> None:
        self._cache = cache_store
        self._artifacts = artifact_store
        self._fetcher = fetcher
        self._extractor = extractor
        self._analyzer = analyzer
        self._artifact_dir = artifact_dir
        self._analysis_timeout_s = analysis_timeout_s
        self._flights: SingleFlight[AnalysisResult] = SingleFlight()

    async def handle_request(self, policy_ref: str, target_ref: str) -> AnalysisResult:
        """Return findings for (policy_ref, target_ref), computing them at most once.

        Raises:
            InvalidInput: If either reference is empty.
            FetchFailure: If a document cannot be fetched (names the side).
            AnalysisFailure: If the analyzer gives up.
            PersistenceFailure: If the artifact cannot be written or registered.
        """
        t0 = time.monotonic()
        _transition(RequestState.RECEIVED)
        try:
            result = await self._handle(policy_ref, target_ref)
        except Exception:
            _transition(RequestState.FAILED)
            raise

        _transition(RequestState.RESPONDED)
        logger.info(
            "Request complete: cached=%s, findings=%d, %.0f ms",
            result.cached, len(result.findings), (time.monotonic() - t0) * 1000,
        )
        return result

    async def _handle(self, policy_ref: str, target_ref: str) -> AnalysisResult:
        policy_ref = (policy_ref or "").strip()
        target_ref = (target_ref or "").strip()
        if not policy_ref:
            raise InvalidInput("Invalid input: policy is required")
        if not target_ref:
            raise InvalidInput("Invalid input: webpage is required")

        key = derive_cache_key(policy_ref, target_ref)
        set_key_context(artifact_digest(key))
        _transition(RequestState.KEY_DERIVED)

        cached = await self._load_cached(key)
        if cached is not None:
            _transition(RequestState.CACHE_HIT)
            _transition(RequestState.RESPONDING)
            return cached

        _transition(RequestState.CACHE_MISS)
        result, shared = await self._flights.do(
            key, lambda: self._compute(key, policy_ref, target_ref),
        )
        if shared:
            logger.info("Reused result of concurrent request for same key")
        _transition(RequestState.RESPONDING)
        return result

    async def _load_cached(self, key: str) -> AnalysisResult | None:
        """Return the stored result, or None to signal recomputation."""
        try:
            entry = await self._cache.get(key)
        except CacheKeyNotFound:
            return None
        except Exception as e:
            logger.warning("Cache lookup failed, recomputing: %s", e)
            return None

        try:
            raw = await self._artifacts.read(entry.artifact_ref)
        except Exception as e:
            logger.warning(
                "Cached artifact %s unreadable, recomputing: %s", entry.artifact_ref, e,
            )
            return None

        # One finding per line; see _compute.
        text = raw.decode("utf-8", errors="replace")
        findings = [line for line in text.splitlines() if line.strip()]
        return AnalysisResult(
            cache_key=key,
            findings=tuple(findings),
            artifact_ref=entry.artifact_ref,
            cached=True,
        )

    async def _compute(self, key: str, policy_ref: str, target_ref: str) -> AnalysisResult:
        # A leader may have registered between our miss and joining the flight.
        cached = await self._load_cached(key)
        if cached is not None:
            logger.info("Entry registered by a concurrent request, reusing it")
            return cached

        _transition(RequestState.FETCHING)
        policy_raw, target_raw = await self._fetch_both(policy_ref, target_ref)

        _transition(RequestState.EXTRACTING)
        policy_content: ExtractedContent = self._extractor.extract(policy_raw, policy_ref)
        target_content: ExtractedContent = self._extractor.extract(target_raw, target_ref)

        _transition(RequestState.ANALYZING)
        findings = await self._analyzer.analyze(
            policy_content, target_content, timeout_s=self._analysis_timeout_s,
        )

        _transition(RequestState.PERSISTING)
        ref = artifact_name(key, self._artifact_dir)
        try:
            created = await self._artifacts.write(ref, "\n".join(findings))
        except Exception as e:
            logger.error("Failed to write artifact %s: %s", ref, e)
            raise PersistenceFailure("Failed to save findings") from e
        if not created:
            logger.info("Artifact %s already existed, rewritten", ref)

        _transition(RequestState.REGISTERING)
        await self._register(key, ref, policy_ref, target_ref)

        return AnalysisResult(
            cache_key=key, findings=tuple(findings), artifact_ref=ref, cached=False,
        )

    async def _fetch_both(self, policy_ref: str, target_ref: str) -> tuple[bytes, bytes]:
        policy_raw, target_raw = await asyncio.gather(
            self._fetcher.fetch(policy_ref),
            self._fetcher.fetch(target_ref),
            return_exceptions=True,
        )
        for side, ref, outcome in (
            ("policy", policy_ref, policy_raw),
            ("webpage", target_ref, target_raw),
        ):
            if isinstance(outcome, DocumentFetchError):
                logger.warning("Fetch failed for %s: %s", side, outcome.reason)
                raise FetchFailure(side, ref, outcome.reason) from outcome
            if isinstance(outcome, BaseException):
                raise outcome
        return policy_raw, target_raw  # type: ignore[return-value]

    async def _register(
        self, key: str, ref: str, policy_ref: str, target_ref: str
    ) -> None:
        """Put the entry unless the same artifact is already registered."""
        try:
            existing = await self._cache.get(key)
        except CacheKeyNotFound:
            existing = None
        except Exception as e:
            logger.warning("Cache lookup before register failed, putting anyway: %s", e)
            existing = None
        if existing is not None and existing.artifact_ref == ref:
            logger.debug("Key already registered, skipping put")
            return

        entry = CacheEntry(
            cache_key=key, artifact_ref=ref, policy_ref=policy_ref, target_ref=target_ref,
        )
        try:
            await self._cache.put(key, entry)
        except Exception as e:
            logger.error("Failed to register cache entry: %s", e)
            raise PersistenceFailure("Failed to register findings") from e


def _transition(state: RequestState) -> None:
    set_stage(state.value)
    logger.debug("-> %s", state.value)
