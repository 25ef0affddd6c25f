"""Query service — public entry point for routing natural-language queries.

Per query:
  1. Validation: reject missing, blank or over-long text (INVALID_INPUT).
  2. Cache lookup keyed by session id + normalized text.
  3. Pipeline run on the current lexicon snapshot.
  4. Statistics bookkeeping.

Nothing escapes ``process_query``: stage failures become PROCESSING_ERROR
responses and anything else SYSTEM_ERROR responses.
"""

import dataclasses
import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass

from query_router.application.interfaces.lexicon_source import LexiconSource
from query_router.application.services.query_pipeline import QueryPipeline
from query_router.application.services.response_cache import ResponseCache
from query_router.domain.entities import (
    Domain,
    ErrorCode,
    Lexicon,
    QueryError,
    QueryMetadata,
    QueryResponse,
    QueryText,
)
from query_router.domain.exceptions import InvalidQueryInputError
from query_router.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("QueryPipeline")

DEFAULT_MAX_QUERY_LENGTH = 1000
_SELF_CHECK_QUERY = "show contract 123456"


@dataclass(frozen=True)
class QueryValidation:
    """Outcome of validating query text without processing it."""

    valid: bool
    message: str | None
    length: int
    word_count: int


@dataclass(frozen=True)
class QueryStatistics:
    """Service counters since start-up (or the last reset)."""

    total_queries: int
    cache_hits: int
    cache_misses: int
    errors: int
    spell_corrections: int
    average_processing_time_ms: float
    cache_size: int
    cache_max_size: int
    lexicon_source: str


class QueryService:
    """Validates, caches and routes queries through the current pipeline."""

    def __init__(
        self,
        lexicon_source: LexiconSource,
        *,
        cache: ResponseCache | None = None,
        max_query_length: int = DEFAULT_MAX_QUERY_LENGTH,
    ):
        self._source = lexicon_source
        self._cache = cache
        self._max_query_length = max_query_length
        self._pipeline = QueryPipeline(lexicon_source.load())

        self._reload_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._total_queries = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._errors = 0
        self._spell_corrections = 0
        self._processed = 0
        self._total_processing_ms = 0.0

    @property
    def lexicon(self) -> Lexicon:
        return self._pipeline.lexicon

    # ── Processing ─────────────────────────────────────────────────

    def process_query(self, text: str | None, session_id: str | None = None) -> QueryResponse:
        """Route one query. Never raises; failures are reported in ``errors``."""
        started = time.perf_counter()
        try:
            self._bump(total_queries=1)
            try:
                self._validate(text)
            except InvalidQueryInputError as exc:
                self._bump(errors=1)
                return _error_response(text, ErrorCode.INVALID_INPUT, exc.reason, started, session_id)

            key = ResponseCache.key_for(text, session_id)
            if self._cache is not None:
                cached = self._cache.get(key)
                if cached is not None:
                    self._bump(cache_hits=1)
                    if plog.enabled:
                        plog.step_complete(PipelineStage.CACHE, "hit", key=key)
                    return dataclasses.replace(
                        cached,
                        metadata=QueryMetadata(
                            processing_time_ms=round((time.perf_counter() - started) * 1000, 3),
                            session_id=session_id,
                            cached=True,
                        ),
                    )
                self._bump(cache_misses=1)

            pipeline = self._pipeline
            try:
                response = pipeline.run(text, session_id=session_id)
            except Exception as exc:
                plog.step_error(PipelineStage.PIPELINE, f"Failed to process '{text}'", error=exc)
                logger.exception("Query pipeline failed for %r", text)
                self._bump(errors=1)
                return _error_response(
                    text, ErrorCode.PROCESSING_ERROR, f"Error processing query: {exc}", started, session_id,
                )

            self._record(response)
            if self._cache is not None:
                self._cache.set(key, response)
            return response
        except Exception as exc:
            logger.exception("Unexpected error while handling query %r", text)
            self._bump(errors=1)
            return _error_response(text, ErrorCode.SYSTEM_ERROR, f"System error: {exc}", started, session_id)

    def process_queries(
        self,
        texts: Iterable[str | None],
        session_id: str | None = None,
    ) -> list[QueryResponse]:
        """Route several queries in order; one failure never affects the others."""
        return [self.process_query(text, session_id) for text in texts]

    def validate_query(self, text: str | None) -> QueryValidation:
        try:
            self._validate(text)
        except InvalidQueryInputError as exc:
            return QueryValidation(
                valid=False,
                message=exc.reason,
                length=len(text or ""),
                word_count=len((text or "").split()),
            )
        return QueryValidation(valid=True, message=None, length=len(text), word_count=len(text.split()))

    def self_check(self) -> bool:
        """Run a known query end-to-end and confirm it routes as expected."""
        try:
            response = self._pipeline.run(_SELF_CHECK_QUERY)
        except Exception:
            logger.exception("Pipeline self-check failed")
            return False
        return (
            response.decision is not None
            and response.decision.domain is Domain.CONTRACT
            and response.header.contract_number == "123456"
        )

    # ── Lexicon / cache management ─────────────────────────────────

    def reload_lexicon(self) -> Lexicon:
        """Load a fresh lexicon and publish a new pipeline atomically.

        Queries already running keep the pipeline they started with.
        """
        with self._reload_lock:
            with plog.timed_step(PipelineStage.LEXICON, "Reloading lexicon"):
                lexicon = self._source.load()
                self._pipeline = QueryPipeline(lexicon)
            if self._cache is not None:
                self._cache.clear()
        logger.info("Lexicon reloaded from %s: %s", lexicon.source, lexicon.summary())
        return lexicon

    def clear_cache(self) -> int:
        if self._cache is None:
            return 0
        removed = self._cache.clear()
        logger.info("Response cache cleared (%d entries)", removed)
        return removed

    # ── Statistics ─────────────────────────────────────────────────

    def statistics(self) -> QueryStatistics:
        cache = self._cache.get_stats() if self._cache is not None else {"size": 0, "max_size": 0}
        with self._stats_lock:
            average = self._total_processing_ms / self._processed if self._processed else 0.0
            return QueryStatistics(
                total_queries=self._total_queries,
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
                errors=self._errors,
                spell_corrections=self._spell_corrections,
                average_processing_time_ms=round(average, 3),
                cache_size=cache["size"],
                cache_max_size=cache["max_size"],
                lexicon_source=self.lexicon.source,
            )

    def reset_statistics(self) -> None:
        with self._stats_lock:
            self._total_queries = 0
            self._cache_hits = 0
            self._cache_misses = 0
            self._errors = 0
            self._spell_corrections = 0
            self._processed = 0
            self._total_processing_ms = 0.0

    # ── Helpers ────────────────────────────────────────────────────

    def _validate(self, text: str | None) -> None:
        if text is None or not text.strip():
            raise InvalidQueryInputError("Query cannot be null or empty")
        if len(text) > self._max_query_length:
            raise InvalidQueryInputError(
                f"Query exceeds maximum length of {self._max_query_length} characters"
            )

    def _bump(self, **counters: int) -> None:
        with self._stats_lock:
            for name, amount in counters.items():
                attribute = f"_{name}"
                setattr(self, attribute, getattr(self, attribute) + amount)

    def _record(self, response: QueryResponse) -> None:
        with self._stats_lock:
            self._processed += 1
            self._total_processing_ms += response.metadata.processing_time_ms
            if response.has_spell_corrections:
                self._spell_corrections += 1


def _error_response(
    text: str | None,
    code: ErrorCode,
    message: str,
    started: float,
    session_id: str | None,
) -> QueryResponse:
    original = text or ""
    return QueryResponse(
        query_text=QueryText(original=original, corrected=original),
        errors=(QueryError(code, message),),
        metadata=QueryMetadata(
            processing_time_ms=round((time.perf_counter() - started) * 1000, 3),
            session_id=session_id,
        ),
    )
