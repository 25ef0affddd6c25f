"""Unit tests for FileLexiconSource and Lexicon normalization."""

import logging

import pytest

from query_router.domain.entities import Lexicon
from query_router.domain.entities.lexicon import (
    DEFAULT_CORRECTIONS,
    DEFAULT_CREATE_KEYWORDS,
    DEFAULT_DISPLAY_FIELDS,
    DEFAULT_PARTS_KEYWORDS,
)
from query_router.infrastructure.lexicon import FileLexiconSource


@pytest.fixture
def lexicon_dir(tmp_path):
    (tmp_path / "parts_keywords.txt").write_text(
        "# parts vocabulary\nparts, part\nwidgets\n\nkeywords=gadget,gizmo\n",
        encoding="utf-8",
    )
    (tmp_path / "spell_corrections.txt").write_text(
        "contrct=contract\nprts -> parts\nthis line is broken\n=nothing\n",
        encoding="utf-8",
    )
    (tmp_path / "display_fields.txt").write_text(
        "Effective = effective_date\nbad line\nvendor=SUPPLIER\n",
        encoding="utf-8",
    )
    return tmp_path


# ── File loading ─────────────────────────────────────────────────────

class TestFileLexiconSource:

    def test_keyword_file_formats(self, lexicon_dir):
        lexicon = FileLexiconSource(lexicon_dir).load()

        assert lexicon.parts_keywords == ("parts", "part", "widgets", "gadget", "gizmo")

    def test_corrections_accept_both_separators(self, lexicon_dir):
        lexicon = FileLexiconSource(lexicon_dir).load()

        assert dict(lexicon.corrections) == {"contrct": "contract", "prts": "parts"}

    def test_malformed_lines_are_skipped_with_warning(self, lexicon_dir, caplog):
        with caplog.at_level(logging.WARNING):
            lexicon = FileLexiconSource(lexicon_dir).load()

        assert lexicon.display_fields == (("effective", "EFFECTIVE_DATE"), ("vendor", "SUPPLIER"))
        assert "Skipping malformed correction" in caplog.text
        assert "Skipping malformed display field" in caplog.text

    def test_missing_files_fall_back_to_defaults(self, lexicon_dir):
        lexicon = FileLexiconSource(lexicon_dir).load()

        assert lexicon.create_keywords == DEFAULT_CREATE_KEYWORDS

    def test_missing_directory_loads_full_defaults(self, tmp_path):
        lexicon = FileLexiconSource(tmp_path / "nowhere").load()

        assert lexicon.parts_keywords == DEFAULT_PARTS_KEYWORDS
        assert dict(lexicon.corrections) == DEFAULT_CORRECTIONS
        assert lexicon.display_fields == DEFAULT_DISPLAY_FIELDS
        assert lexicon.source == str(tmp_path / "nowhere")

    def test_empty_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "parts_keywords.txt").write_text("# nothing here\n\n", encoding="utf-8")

        lexicon = FileLexiconSource(tmp_path).load()

        assert lexicon.parts_keywords == DEFAULT_PARTS_KEYWORDS

    def test_undecodable_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "parts_keywords.txt").write_bytes(b"\xff\xfe\xfa not utf-8")

        lexicon = FileLexiconSource(tmp_path).load()

        assert lexicon.parts_keywords == DEFAULT_PARTS_KEYWORDS

    def test_custom_file_names(self, tmp_path):
        (tmp_path / "my_parts.txt").write_text("sprockets\n", encoding="utf-8")

        lexicon = FileLexiconSource(tmp_path, parts_keywords_file="my_parts.txt").load()

        assert lexicon.parts_keywords == ("sprockets",)

    def test_shipped_lexicon_matches_defaults(self):
        """The data/lexicon files carry the same tables as the built-in defaults."""
        from query_router.config import Settings

        lexicon = FileLexiconSource(Settings().lexicon_path).load()
        defaults = Lexicon.default()

        assert lexicon.parts_keywords == defaults.parts_keywords
        assert lexicon.create_keywords == defaults.create_keywords
        assert lexicon.contract_keywords == defaults.contract_keywords
        assert dict(lexicon.corrections) == dict(defaults.corrections)
        assert lexicon.display_fields == defaults.display_fields


# ── Normalization ────────────────────────────────────────────────────

class TestLexiconBuild:

    def test_keywords_are_lower_cased_and_deduplicated(self):
        lexicon = Lexicon.build(parts_keywords=("Parts", "parts", "  Line   Items "))

        assert lexicon.parts_keywords == ("parts", "line items")

    def test_corrections_are_read_only(self):
        lexicon = Lexicon.default()

        with pytest.raises(TypeError):
            lexicon.corrections["new"] = "value"

    def test_summary_counts(self):
        lexicon = Lexicon.build(parts_keywords=("a", "b"), source="test")

        summary = lexicon.summary()

        assert summary["source"] == "test"
        assert summary["parts_keywords"] == 2
        assert summary["corrections"] == len(DEFAULT_CORRECTIONS)
