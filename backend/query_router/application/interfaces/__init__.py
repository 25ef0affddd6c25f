from .lexicon_source import LexiconSource

__all__ = [
    "LexiconSource",
]
