"""File-backed lexicon source — reads keyword, correction and display tables from text files.

File formats (``#`` comments and blank lines are ignored everywhere):

    parts_keywords.txt / create_keywords.txt / contract_keywords.txt
        one keyword per line, or comma-separated; ``name=a,b,c`` also accepted
    spell_corrections.txt
        ``wrong=correct`` or ``wrong -> correct``
    display_fields.txt
        ``keyword=COLUMN_NAME``

A missing, unreadable or empty file falls back to the built-in default for
that table, so query processing never depends on the files being present.
"""

import logging
from pathlib import Path

from query_router.application.interfaces.lexicon_source import LexiconSource
from query_router.domain.entities import Lexicon
from query_router.domain.entities.lexicon import (
    DEFAULT_CONTRACT_KEYWORDS,
    DEFAULT_CORRECTIONS,
    DEFAULT_CREATE_KEYWORDS,
    DEFAULT_DISPLAY_FIELDS,
    DEFAULT_PARTS_KEYWORDS,
)
from query_router.domain.exceptions import LexiconLoadError

logger = logging.getLogger(__name__)


class FileLexiconSource(LexiconSource):
    """Builds a Lexicon from a directory of key-value text files."""

    def __init__(
        self,
        directory: str | Path,
        *,
        spell_corrections_file: str = "spell_corrections.txt",
        parts_keywords_file: str = "parts_keywords.txt",
        create_keywords_file: str = "create_keywords.txt",
        contract_keywords_file: str = "contract_keywords.txt",
        display_fields_file: str = "display_fields.txt",
    ):
        self._directory = Path(directory)
        self._spell_corrections_file = spell_corrections_file
        self._parts_keywords_file = parts_keywords_file
        self._create_keywords_file = create_keywords_file
        self._contract_keywords_file = contract_keywords_file
        self._display_fields_file = display_fields_file

    def load(self) -> Lexicon:
        lexicon = Lexicon.build(
            parts_keywords=self._keywords(self._parts_keywords_file, DEFAULT_PARTS_KEYWORDS),
            create_keywords=self._keywords(self._create_keywords_file, DEFAULT_CREATE_KEYWORDS),
            contract_keywords=self._keywords(self._contract_keywords_file, DEFAULT_CONTRACT_KEYWORDS),
            corrections=self._corrections(self._spell_corrections_file),
            display_fields=self._display_fields(self._display_fields_file),
            source=str(self._directory),
        )
        logger.info("Lexicon loaded from %s: %s", self._directory, lexicon.summary())
        return lexicon

    # ── Tables ─────────────────────────────────────────────────────

    def _keywords(self, filename: str, default: tuple[str, ...]) -> tuple[str, ...]:
        lines = self._lines_or_none(filename)
        if lines is None:
            return default

        keywords: list[str] = []
        for _, line in lines:
            if "=" in line:
                line = line.split("=", 1)[1]
            keywords.extend(part.strip() for part in line.split(",") if part.strip())

        if not keywords:
            logger.warning("No keywords in %s, using built-in defaults", filename)
            return default
        return tuple(keywords)

    def _corrections(self, filename: str) -> dict[str, str]:
        lines = self._lines_or_none(filename)
        if lines is None:
            return dict(DEFAULT_CORRECTIONS)

        corrections: dict[str, str] = {}
        for number, line in lines:
            pair = _split_pair(line, ("->", "="))
            if pair is None:
                logger.warning("Skipping malformed correction in %s line %d: %r", filename, number, line)
                continue
            corrections[pair[0]] = pair[1]

        if not corrections:
            logger.warning("No corrections in %s, using built-in defaults", filename)
            return dict(DEFAULT_CORRECTIONS)
        return corrections

    def _display_fields(self, filename: str) -> tuple[tuple[str, str], ...]:
        lines = self._lines_or_none(filename)
        if lines is None:
            return DEFAULT_DISPLAY_FIELDS

        pairs: list[tuple[str, str]] = []
        for number, line in lines:
            pair = _split_pair(line, ("=",))
            if pair is None:
                logger.warning("Skipping malformed display field in %s line %d: %r", filename, number, line)
                continue
            pairs.append(pair)

        if not pairs:
            logger.warning("No display fields in %s, using built-in defaults", filename)
            return DEFAULT_DISPLAY_FIELDS
        return tuple(pairs)

    # ── File access ────────────────────────────────────────────────

    def _lines_or_none(self, filename: str) -> list[tuple[int, str]] | None:
        """Content lines with their 1-based numbers, or None to use the defaults."""
        try:
            return self._read_lines(self._directory / filename)
        except FileNotFoundError:
            logger.warning("Lexicon file %s not found, using built-in defaults", self._directory / filename)
        except LexiconLoadError as exc:
            logger.warning("%s — using built-in defaults", exc)
        return None

    @staticmethod
    def _read_lines(path: Path) -> list[tuple[int, str]]:
        if not path.is_file():
            raise FileNotFoundError(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LexiconLoadError(str(path), str(exc)) from exc

        lines: list[tuple[int, str]] = []
        for number, line in enumerate(raw.splitlines(), start=1):
            line = line.strip()
            if line and not line.startswith("#"):
                lines.append((number, line))
        return lines


def _split_pair(line: str, separators: tuple[str, ...]) -> tuple[str, str] | None:
    for separator in separators:
        if separator in line:
            left, right = line.split(separator, 1)
            left, right = left.strip(), right.strip()
            if left and right:
                return left, right
            return None
    return None
