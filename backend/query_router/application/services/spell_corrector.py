"""Spell correction — single-pass token substitution through the lexicon's correction map."""

import re

from query_router.domain.entities import Lexicon, QueryText

# leading punctuation, clean token, trailing punctuation
_TOKEN_RE = re.compile(r"^(\W*)(.*?)(\W*)$", re.DOTALL)


class SpellCorrector:
    """Corrects known misspellings token by token.

    Corrections are applied once; a substituted word is never looked up
    again. The canonical form from the map is used as-is, except that a
    token whose first letter was upper-case keeps an upper-case first letter
    ("Contrct" → "Contract").
    """

    def __init__(self, lexicon: Lexicon):
        self._corrections = lexicon.corrections

    def correct(self, text: str) -> QueryText:
        if not text or not text.strip():
            return QueryText(original=text, corrected=text, changed=False)

        changed = False
        corrected_tokens: list[str] = []
        for token in text.split():
            replacement = self._correct_token(token)
            if replacement != token:
                changed = True
            corrected_tokens.append(replacement)

        return QueryText(
            original=text,
            corrected=" ".join(corrected_tokens),
            changed=changed,
        )

    def _correct_token(self, token: str) -> str:
        match = _TOKEN_RE.match(token)
        if match is None:
            return token
        leading, clean, trailing = match.groups()
        if not clean:
            return token

        canonical = self._corrections.get(clean.lower())
        if canonical is None:
            return token

        if clean[0].isupper():
            canonical = canonical[0].upper() + canonical[1:]
        return f"{leading}{canonical}{trailing}"
