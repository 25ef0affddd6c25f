"""Pydantic schemas for query API requests and responses.

Wire format is camelCase (``contractNumber``, ``queryMetadata``); Python
code uses the snake_case field names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Request Schemas ──────────────────────────────────────────────────


class QueryRequest(_CamelModel):
    """Request body for routing one natural-language query."""

    question: str = Field(..., description="Free-text query, e.g. 'show contract 123456'")
    session_id: str | None = Field(default=None, description="Optional caller session for cache namespacing")


class BatchQueryRequest(_CamelModel):
    """Request body for routing several queries in one call."""

    questions: list[str] = Field(..., min_length=1, max_length=100)
    session_id: str | None = None


class ValidateQueryRequest(_CamelModel):
    """Request body for validating query text without routing it."""

    question: str


# ── Response Schemas ─────────────────────────────────────────────────


class QueryHeaderSchema(_CamelModel):
    """Identifying fields; null when not found."""

    contract_number: str | None = None
    part_number: str | None = None
    customer_number: str | None = None
    account_number: str | None = None
    customer_name: str | None = None
    created_by: str | None = None


class QueryMetadataSchema(_CamelModel):
    """Routing decision and timing for one query."""

    query_type: str | None = None
    action_type: str | None = None
    reason: str | None = None
    business_rule_violation: bool = False
    processing_time_ms: float = 0.0
    timestamp: datetime
    session_id: str | None = None
    cached: bool = False


class EntitySchema(_CamelModel):
    """An extracted (attribute, operator, value) filter."""

    attribute: str
    operator: str
    value: str


class QueryErrorSchema(_CamelModel):
    code: str
    message: str


class QueryResponseSchema(_CamelModel):
    """Full routed-query response."""

    original_text: str
    corrected_text: str
    has_spell_corrections: bool = False
    header: QueryHeaderSchema
    query_metadata: QueryMetadataSchema
    entities: list[EntitySchema] = []
    display_entities: list[str] = []
    errors: list[QueryErrorSchema] = []
    valid: bool = True


class QueryValidationSchema(_CamelModel):
    valid: bool
    message: str | None = None
    length: int
    word_count: int


class QueryStatisticsSchema(_CamelModel):
    """Service counters since start-up."""

    total_queries: int
    cache_hits: int
    cache_misses: int
    errors: int
    spell_corrections: int
    average_processing_time_ms: float
    cache_size: int
    cache_max_size: int
    lexicon_source: str


class LexiconSummarySchema(_CamelModel):
    """Sizes of the lexicon tables currently in use."""

    source: str
    parts_keywords: int
    create_keywords: int
    contract_keywords: int
    corrections: int
    display_fields: int


class CacheClearedSchema(_CamelModel):
    removed: int


class PipelineHealthSchema(_CamelModel):
    status: str
    self_check: bool
    lexicon_source: str
