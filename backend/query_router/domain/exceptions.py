"""Domain-specific exceptions — framework-independent."""


class InvalidQueryInputError(Exception):
    """Raised when query text is missing, blank, or too long to process."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class LexiconLoadError(Exception):
    """Raised when a lexicon configuration file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not load lexicon file '{path}': {reason}")
