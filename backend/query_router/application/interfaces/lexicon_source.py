"""Abstract interface for lexicon sources."""

from abc import ABC, abstractmethod

from query_router.domain.entities import Lexicon


class LexiconSource(ABC):
    """Port: anything that can produce a complete Lexicon snapshot.

    Implementations must never fail because a table is missing; they fall
    back to the built-in defaults for that table instead.
    """

    @abstractmethod
    def load(self) -> Lexicon:
        """Build and return a new Lexicon."""
        ...
