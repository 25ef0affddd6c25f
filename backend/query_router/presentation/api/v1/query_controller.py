"""Query API controller — endpoints for routing natural-language contract queries."""

from fastapi import APIRouter, Depends

from query_router.application.schemas.query import (
    BatchQueryRequest,
    CacheClearedSchema,
    EntitySchema,
    LexiconSummarySchema,
    PipelineHealthSchema,
    QueryErrorSchema,
    QueryHeaderSchema,
    QueryMetadataSchema,
    QueryRequest,
    QueryResponseSchema,
    QueryStatisticsSchema,
    QueryValidationSchema,
    ValidateQueryRequest,
)
from query_router.application.services.query_service import QueryService
from query_router.domain.entities import Lexicon, QueryResponse
from query_router.infrastructure.dependencies import get_query_service

router = APIRouter(prefix="/query", tags=["query"])


# ── Helpers ──────────────────────────────────────────────────────────


def _to_response_schema(response: QueryResponse) -> QueryResponseSchema:
    """Map domain QueryResponse to response schema."""
    decision = response.decision
    return QueryResponseSchema(
        original_text=response.query_text.original,
        corrected_text=response.query_text.corrected,
        has_spell_corrections=response.has_spell_corrections,
        header=QueryHeaderSchema(
            contract_number=response.header.contract_number,
            part_number=response.header.part_number,
            customer_number=response.header.customer_number,
            account_number=response.header.account_number,
            customer_name=response.header.customer_name,
            created_by=response.header.created_by,
        ),
        query_metadata=QueryMetadataSchema(
            query_type=decision.domain.value if decision else None,
            action_type=decision.action_type.value if decision else None,
            reason=decision.reason if decision else None,
            business_rule_violation=decision.business_rule_violation if decision else False,
            processing_time_ms=response.metadata.processing_time_ms,
            timestamp=response.metadata.timestamp,
            session_id=response.metadata.session_id,
            cached=response.metadata.cached,
        ),
        entities=[
            EntitySchema(
                attribute=e.attribute,
                operator=e.operator.value,
                value=e.value,
            )
            for e in response.entities
        ],
        display_entities=list(response.display_fields),
        errors=[
            QueryErrorSchema(code=err.code.value, message=err.message)
            for err in response.errors
        ],
        valid=response.is_valid,
    )


def _to_lexicon_schema(lexicon: Lexicon) -> LexiconSummarySchema:
    return LexiconSummarySchema(**lexicon.summary())


# ── Endpoints ────────────────────────────────────────────────────────


@router.post("", response_model=QueryResponseSchema)
async def route_query(
    body: QueryRequest,
    service: QueryService = Depends(get_query_service),
):
    """Route one query: spell-correct → extract → classify → assemble."""
    response = service.process_query(body.question, session_id=body.session_id)
    return _to_response_schema(response)


@router.post("/batch", response_model=list[QueryResponseSchema])
async def route_queries(
    body: BatchQueryRequest,
    service: QueryService = Depends(get_query_service),
):
    """Route several queries; results keep the request order."""
    responses = service.process_queries(body.questions, session_id=body.session_id)
    return [_to_response_schema(r) for r in responses]


@router.post("/validate", response_model=QueryValidationSchema)
async def validate_query(
    body: ValidateQueryRequest,
    service: QueryService = Depends(get_query_service),
):
    """Check query text against input rules without routing it."""
    result = service.validate_query(body.question)
    return QueryValidationSchema(
        valid=result.valid,
        message=result.message,
        length=result.length,
        word_count=result.word_count,
    )


@router.get("/statistics", response_model=QueryStatisticsSchema)
async def get_statistics(service: QueryService = Depends(get_query_service)):
    """Counters since start-up: queries, cache hits/misses, errors, timing."""
    stats = service.statistics()
    return QueryStatisticsSchema(
        total_queries=stats.total_queries,
        cache_hits=stats.cache_hits,
        cache_misses=stats.cache_misses,
        errors=stats.errors,
        spell_corrections=stats.spell_corrections,
        average_processing_time_ms=stats.average_processing_time_ms,
        cache_size=stats.cache_size,
        cache_max_size=stats.cache_max_size,
        lexicon_source=stats.lexicon_source,
    )


@router.delete("/cache", response_model=CacheClearedSchema)
async def clear_cache(service: QueryService = Depends(get_query_service)):
    """Drop every cached response."""
    return CacheClearedSchema(removed=service.clear_cache())


@router.get("/lexicon", response_model=LexiconSummarySchema)
async def get_lexicon(service: QueryService = Depends(get_query_service)):
    """Summary of the lexicon currently in use."""
    return _to_lexicon_schema(service.lexicon)


@router.post("/lexicon/reload", response_model=LexiconSummarySchema)
async def reload_lexicon(service: QueryService = Depends(get_query_service)):
    """Re-read the lexicon files and swap them in atomically."""
    return _to_lexicon_schema(service.reload_lexicon())


@router.get("/health", response_model=PipelineHealthSchema)
async def pipeline_health(service: QueryService = Depends(get_query_service)):
    """Run a known query through the pipeline and report the outcome."""
    ok = service.self_check()
    return PipelineHealthSchema(
        status="healthy" if ok else "degraded",
        self_check=ok,
        lexicon_source=service.lexicon.source,
    )
