from .file_lexicon_source import FileLexiconSource

__all__ = [
    "FileLexiconSource",
]
