"""Unit tests for the prompt compressor and its fallbacks."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from standprompt.models.compression import CompressionConfig, CompressionLevel
from standprompt.services.prompt_compressor import (
    TEXT_COMPRESSION_APPLIED,
    abbreviate_section,
    compress_prompt,
    compress_text,
    fallback_compress,
    legacy_compress_prompt,
    prioritize_sections,
    truncate_to_boundary,
)
from standprompt.utils.errors import ConfigurationError

_BODY_LINE = "alpha beta gamma delta epsilon"


def _section(header: str, lines: int = 15) -> str:
    return "\n".join([header, *([_BODY_LINE] * lines)])


def _config(max_length: int, *phrases: str, **kwargs) -> CompressionConfig:
    kwargs.setdefault("compression_level", CompressionLevel.CONSERVATIVE)
    return CompressionConfig(max_length=max_length, protected_content=list(phrases), **kwargs)


# ======================================================================
# Stage 1: text shrink
# ======================================================================


class TestCompressText:
    def test_conservative_only_normalizes_whitespace(self) -> None:
        text = "a    b  \n\n\n\n  c in order to d"
        assert compress_text(text, CompressionLevel.CONSERVATIVE) == "a b\n\nc in order to d"

    def test_paragraph_breaks_survive(self) -> None:
        assert compress_text("one\n\ntwo", CompressionLevel.AGGRESSIVE) == "one\n\ntwo"

    def test_moderate_replacements(self) -> None:
        text = "Please ensure that the logo shows in order to attract buyers"
        assert (
            compress_text(text, CompressionLevel.MODERATE)
            == "ensure the logo shows to attract buyers"
        )

    def test_aggressive_replacements_and_fillers(self) -> None:
        text = "This is very important and the finish is really glossy"
        assert (
            compress_text(text, CompressionLevel.AGGRESSIVE)
            == "This is critical and the finish is glossy"
        )

    def test_aggressive_keeps_intensifier_before_numbers(self) -> None:
        text = "absolutely EXACTLY 3 shelves, very 5 rows"
        assert compress_text(text, CompressionLevel.AGGRESSIVE) == text


# ======================================================================
# compress_prompt
# ======================================================================


class TestCompressPrompt:
    def test_prompt_that_fits_is_unchanged(self) -> None:
        result = compress_prompt("EXACTLY 3 shelves", _config(100, "EXACTLY 3 shelves"))
        assert result.compressed_prompt == "EXACTLY 3 shelves"
        assert result.compression_ratio == 1.0
        assert result.protected_content_preserved is True
        assert result.sections_removed == []
        assert result.sections_abbreviated == []

    def test_fitting_prompt_reports_absent_phrase(self) -> None:
        result = compress_prompt("short prompt", _config(100, "EXACTLY 3 shelves"))
        assert result.compression_ratio == 1.0
        assert result.protected_content_preserved is False

    def test_text_only_compression_protects_phrases(self) -> None:
        prompt = "KEEP in order to win" + " " * 50 + "in order to win"
        config = _config(
            40, "KEEP in order to win", compression_level=CompressionLevel.MODERATE
        )
        result = compress_prompt(prompt, config)
        assert result.compressed_prompt == "KEEP in order to win to win"
        assert result.sections_abbreviated == [TEXT_COMPRESSION_APPLIED]
        assert result.protected_content_preserved is True
        assert result.original_length == len(prompt)

    def test_digit_phrase_does_not_corrupt_other_phrases(self) -> None:
        prompt = "CRITICAL" + " " * 60 + "\nEXACTLY 3 shelves with 0 gaps"
        result = compress_prompt(prompt, _config(60, "EXACTLY 3 shelves", "0"))
        assert result.compressed_prompt == "CRITICAL\nEXACTLY 3 shelves with 0 gaps"
        assert "\ue000" not in result.compressed_prompt
        assert result.protected_content_preserved is True
        assert result.sections_abbreviated == [TEXT_COMPRESSION_APPLIED]

    def test_section_compression(self) -> None:
        protected = "CRITICAL NUMERICAL REQUIREMENTS:\nEXACTLY 3 shelves: 3 shelf level(s) total"
        brand = _section("BRAND NOTES\nBRAND: Acme")
        instructions = _section("GENERATION NOTES:")
        generic = _section("Misc notes:")
        prompt = "\n\n".join(["Premium stand.", generic, instructions, brand, protected])

        result = compress_prompt(prompt, _config(900, "EXACTLY 3 shelves"))

        assert result.compressed_length <= 900
        assert result.compressed_prompt.startswith("Premium stand.\n\n" + protected)
        assert brand in result.compressed_prompt
        assert result.protected_content_preserved is True
        assert result.sections_removed == ["generic"]
        assert len(result.sections_abbreviated) == 1
        assert result.sections_abbreviated[0].startswith("instruction (")
        assert result.compression_ratio < 1.0

    def test_missing_protected_phrase_is_reported(self) -> None:
        sections = [_section(f"NOTES {i}:", lines=20) for i in range(10)]
        prompt = "\n\n".join(["Base section.", *sections])
        assert len(prompt) > 6000

        result = compress_prompt(prompt, _config(4800, "PHRASE THAT IS NOWHERE"))

        assert result.compressed_length <= 4800
        assert result.protected_content_preserved is False
        assert result.sections_removed

    def test_protected_sections_are_never_cut(self) -> None:
        protected = _section("EXACTLY 3 shelves", lines=20)
        prompt = "Base.\n\n" + protected
        result = compress_prompt(prompt, _config(200, "EXACTLY 3 shelves"))
        assert protected in result.compressed_prompt
        assert result.compressed_length > 200
        assert result.protected_content_preserved is True

    def test_non_positive_max_length_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CompressionConfig(max_length=0)
        with pytest.raises(ConfigurationError):
            compress_prompt("anything", CompressionConfig.model_construct(max_length=0))


# ======================================================================
# Stage 2 helpers
# ======================================================================


class TestSectionRanking:
    def test_last_matching_category_names_the_type(self) -> None:
        ranked = prioritize_sections(["EXACTLY 3 shelves for BRAND: Acme"], _config(100))
        assert ranked[0].type == "brand"
        assert ranked[0].priority == 190

    def test_order_by_priority(self) -> None:
        sections = ["plain text", "MATERIAL: oak", "EXACTLY 2 rows"]
        ranked = prioritize_sections(sections, _config(100))
        assert [r.type for r in ranked] == ["form-critical", "material", "generic"]

    def test_form_priority_can_be_disabled(self) -> None:
        ranked = prioritize_sections(["EXACTLY 2 rows"], _config(100, maintain_form_priority=False))
        assert ranked[0].priority == 0

    def test_creative_context_can_be_disabled(self) -> None:
        ranked = prioritize_sections(
            ["CREATIVE STYLE: soft"], _config(100, preserve_creative_context=False)
        )
        assert ranked[0].priority == 0


class TestAbbreviateSection:
    def test_fitting_section_is_unchanged(self) -> None:
        assert abbreviate_section("HEADER\nline", 50) == "HEADER\nline"

    def test_keeps_whole_lines(self) -> None:
        assert abbreviate_section("HEADER\nline one\nline two", 15) == "HEADER\nline one"

    def test_header_too_long_returns_empty(self) -> None:
        assert abbreviate_section("A VERY LONG HEADER LINE\nbody", 10) == ""


# ======================================================================
# Fallbacks
# ======================================================================


class TestLegacyAndTruncation:
    def test_legacy_keeps_fitting_prompt(self) -> None:
        assert legacy_compress_prompt("short", 100) == "short"

    def test_legacy_prefers_marked_sections(self) -> None:
        prompt = "\n\n".join(
            ["Base.", "plain filler " * 10, "CRITICAL NUMERICAL:\nEXACTLY 3 shelves"]
        )
        packed = legacy_compress_prompt(prompt, 60)
        assert packed == "Base.\n\nCRITICAL NUMERICAL:\nEXACTLY 3 shelves"

    def test_legacy_cuts_first_overflowing_section_to_three_lines(self) -> None:
        section = "MATERIAL:\nline 1\nline 2\nline 3\nline 4"
        packed = legacy_compress_prompt("Base.\n\n" + section, 35)
        assert packed == "Base.\n\nMATERIAL:\nline 1\nline 2"

    def test_truncate_at_sentence_end(self) -> None:
        assert truncate_to_boundary("One. Two three four", 10) == "One."

    def test_truncate_ignores_decimal_points(self) -> None:
        assert truncate_to_boundary("Size 3.5cm wide and tall", 12) == "Size 3.5cm"

    def test_truncate_at_word_boundary(self) -> None:
        assert truncate_to_boundary("alpha beta gamma", 12) == "alpha beta"

    def test_hard_cut_without_boundary(self) -> None:
        assert truncate_to_boundary("abcdefghij", 5) == "abcde"

    def test_fallback_always_fits(self) -> None:
        packed = fallback_compress("word " * 2000, 100)
        assert len(packed) <= 100
        assert packed.startswith("word")
