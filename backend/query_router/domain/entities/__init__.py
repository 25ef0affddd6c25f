from .query import (
    ActionType,
    Domain,
    ErrorCode,
    ExtractedEntity,
    Operator,
    QueryError,
    QueryHeader,
    QueryMetadata,
    QueryResponse,
    QueryText,
    RoutingDecision,
)
from .lexicon import Lexicon
