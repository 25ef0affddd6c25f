"""FastAPI dependency injection — wires infrastructure to application layer."""

from functools import lru_cache

from query_router.config import get_settings
from query_router.application.services import QueryService, ResponseCache
from query_router.infrastructure.lexicon import FileLexiconSource


def build_lexicon_source() -> FileLexiconSource:
    """Lexicon source pointed at the configured lexicon directory."""
    settings = get_settings()
    return FileLexiconSource(
        settings.lexicon_path,
        spell_corrections_file=settings.spell_corrections_file,
        parts_keywords_file=settings.parts_keywords_file,
        create_keywords_file=settings.create_keywords_file,
        contract_keywords_file=settings.contract_keywords_file,
        display_fields_file=settings.display_fields_file,
    )


@lru_cache
def get_query_service() -> QueryService:
    """Process-wide QueryService — holds the lexicon snapshot, cache and counters."""
    settings = get_settings()
    cache = ResponseCache(settings.response_cache_size) if settings.response_cache_enabled else None
    return QueryService(
        build_lexicon_source(),
        cache=cache,
        max_query_length=settings.max_query_length,
    )
