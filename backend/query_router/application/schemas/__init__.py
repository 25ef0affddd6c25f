from .query import (
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
