"""Ordered keyword matching shared by classification, operator detection and display fields.

Every rule table in the pipeline is an ordered tuple of ``KeywordRule``;
``first_match`` returns the earliest rule (in table order, not text order)
that matches, ``find_all`` returns every matching rule in table order.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class KeywordRule(Generic[T]):
    """A compiled pattern and the value it stands for."""

    pattern: re.Pattern[str]
    payload: T


@dataclass(frozen=True)
class KeywordHit(Generic[T]):
    """A rule that matched, with the location of its first occurrence."""

    payload: T
    start: int
    end: int
    matched: str


def rule(pattern: str, payload: T) -> KeywordRule[T]:
    """Compile a raw regex into a case-insensitive rule."""
    return KeywordRule(re.compile(pattern, re.IGNORECASE), payload)


def phrase_pattern(phrase: str, *, prefix: bool = False) -> re.Pattern[str]:
    """Pattern matching ``phrase`` on word boundaries, any whitespace between words.

    With ``prefix=True`` only the leading boundary is required, so
    ``specification`` also matches ``specifications``.
    """
    body = r"\s+".join(re.escape(word) for word in phrase.split())
    tail = "" if prefix else r"\b"
    return re.compile(rf"\b{body}{tail}", re.IGNORECASE)


def compile_phrases(phrases: Iterable[str], *, prefix: bool = False) -> tuple[KeywordRule[str], ...]:
    return tuple(
        KeywordRule(phrase_pattern(phrase, prefix=prefix), phrase)
        for phrase in phrases
        if phrase.strip()
    )


def compile_mapping(pairs: Iterable[tuple[str, T]], *, prefix: bool = False) -> tuple[KeywordRule[T], ...]:
    return tuple(
        KeywordRule(phrase_pattern(phrase, prefix=prefix), payload)
        for phrase, payload in pairs
        if phrase.strip()
    )


def first_match(text: str, rules: Iterable[KeywordRule[T]]) -> KeywordHit[T] | None:
    for candidate in rules:
        match = candidate.pattern.search(text)
        if match:
            return KeywordHit(candidate.payload, match.start(), match.end(), match.group(0))
    return None


def find_all(text: str, rules: Iterable[KeywordRule[T]]) -> tuple[KeywordHit[T], ...]:
    hits: list[KeywordHit[T]] = []
    for candidate in rules:
        match = candidate.pattern.search(text)
        if match:
            hits.append(KeywordHit(candidate.payload, match.start(), match.end(), match.group(0)))
    return tuple(hits)


def contains_any(text: str, rules: Iterable[KeywordRule[T]]) -> bool:
    return first_match(text, rules) is not None
