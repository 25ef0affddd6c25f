from .action_type_resolver import ActionTypeResolver
from .domain_classifier import DomainClassifier
from .entity_extractor import EntityExtractor
from .query_pipeline import QueryPipeline
from .query_service import QueryService, QueryStatistics, QueryValidation
from .response_assembler import ResponseAssembler
from .response_cache import ResponseCache
from .spell_corrector import SpellCorrector

__all__ = [
    "ActionTypeResolver",
    "DomainClassifier",
    "EntityExtractor",
    "QueryPipeline",
    "QueryService",
    "QueryStatistics",
    "QueryValidation",
    "ResponseAssembler",
    "ResponseCache",
    "SpellCorrector",
]
