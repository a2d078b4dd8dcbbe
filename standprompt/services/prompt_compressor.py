"""Priority-driven prompt compression with protected phrases.

Compression runs in two stages and stops as soon as the prompt fits:

**Stage 1 (text shrink).**  Whitespace normalisation always; a table of
verbose phrases at ``moderate`` and above; a second table plus filler
intensifier stripping at ``aggressive``.  Protected phrases are swapped
for private-use placeholders before any rewriting and restored after, so
this stage can never alter them.

**Stage 2 (sections).**  The text is split on blank lines.  The first
section (the caller's base prompt) is always kept, and so is any section
containing a protected phrase.  The rest are ranked by a fixed marker
rubric and added greedily; a section that does not fit whole is
abbreviated line by line or dropped.

The result's ``protected_content_preserved`` flag is computed by literal
substring search on the output.  Callers must treat ``False`` as a
failure and fall back (see :func:`fallback_compress`).

Also holds the simpler legacy compressor and the truncate-to-boundary
strategy used as fallbacks.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from standprompt.models.compression import CompressionConfig, CompressionLevel, CompressionResult
from standprompt.utils.errors import ConfigurationError
from standprompt.utils.logging import get_logger

logger = get_logger(__name__)

TEXT_COMPRESSION_APPLIED = "text-compression-applied"

# Space for the "\n\n" joining two sections.
_SEPARATOR = "\n\n"
# Stage 2 only tries abbreviation with more room than this.
_MIN_ABBREVIATION_SPACE = 50
# Abbreviation only tries a compressed partial line with more room than this.
_MIN_PARTIAL_LINE_SPACE = 20
DEFAULT_LEGACY_MAX_LENGTH = 4800

_MODERATE_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("must be prominently displayed", "must display prominently"),
    ("should be clearly visible", "must be visible"),
    ("needs to be positioned", "position"),
    ("it is important that", ""),
    ("please ensure that", "ensure"),
    ("make sure to", "ensure"),
    ("in order to", "to"),
    ("for the purpose of", "for"),
    ("with the goal of", "to"),
    ("take into consideration", "consider"),
    ("as a result of", "due to"),
    ("in the event that", "if"),
    ("at this point in time", "now"),
    ("due to the fact that", "because"),
    ("in spite of the fact that", "although"),
)

_AGGRESSIVE_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("very important", "critical"),
    ("extremely important", "critical"),
    ("highly recommended", "required"),
    ("strongly suggested", "required"),
    ("should definitely", "must"),
    ("ought to be", "must be"),
    ("is required to be", "must be"),
    ("professional quality", "quality"),
    ("commercial grade", "commercial"),
    ("industry standard", "standard"),
    ("state of the art", "advanced"),
    ("cutting edge", "advanced"),
)

# Placeholder delimiters from the Unicode private use area.
_MASK_OPEN = "\ue000"
_MASK_CLOSE = "\ue001"
_MASK_RE = re.compile(f"{_MASK_OPEN}(\\d+){_MASK_CLOSE}")

# Intensifiers are kept when followed by EXACTLY, a digit or a masked phrase.
_FILLER_RE = re.compile(
    r"\b(?:quite|rather|fairly|somewhat|pretty|really|very|extremely|incredibly"
    r"|absolutely|completely|totally|entirely)\s+"
    rf"(?!EXACTLY|exactly|\d|{_MASK_OPEN})",
    re.IGNORECASE,
)
_HORIZONTAL_WS_RE = re.compile(r"[ \t\f\v]+")
_LINE_EDGE_WS_RE = re.compile(r" *\n *")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_SENTENCE_END_RE = re.compile(r"[.!?](?=\s|$)")

# (marker, score) for the legacy compressor; scores add up per section.
_LEGACY_MARKERS: tuple[tuple[str, int], ...] = (
    ("CRITICAL NUMERICAL", 12),
    ("BRAND:", 10),
    ("PRODUCT FOCUS:", 9),
    ("PRODUCT ARRANGEMENT", 9),
    ("CALCULATED PLACEMENT:", 8),
    ("DIMENSIONAL ACCURACY:", 7),
    ("MATERIAL", 6),
)
_LEGACY_ABBREVIATED_LINES = 3


@dataclass(frozen=True)
class _RankedSection:
    text: str
    type: str
    priority: int


# ---------------------------------------------------------------------------
# Stage 1: text shrink
# ---------------------------------------------------------------------------


def _normalize_whitespace(text: str) -> str:
    text = _HORIZONTAL_WS_RE.sub(" ", text)
    text = _LINE_EDGE_WS_RE.sub("\n", text)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def _apply_replacements(text: str, table: Sequence[tuple[str, str]]) -> str:
    for verbose, concise in table:
        text = re.sub(re.escape(verbose), concise, text, flags=re.IGNORECASE)
    return text


def compress_text(text: str, level: CompressionLevel) -> str:
    """Stage-1 text shrink at the given *level*.

    Whitespace runs collapse to one space and three or more newlines
    collapse to a blank line, so paragraph boundaries survive for Stage 2.
    """
    compressed = _normalize_whitespace(text)
    if level in (CompressionLevel.MODERATE, CompressionLevel.AGGRESSIVE):
        compressed = _apply_replacements(compressed, _MODERATE_REPLACEMENTS)
    if level == CompressionLevel.AGGRESSIVE:
        compressed = _apply_replacements(compressed, _AGGRESSIVE_REPLACEMENTS)
        compressed = _FILLER_RE.sub("", compressed)
    # Replacements that map to "" leave double spaces behind.
    return _normalize_whitespace(compressed)


def _mask_protected(text: str, phrases: Sequence[str]) -> tuple[str, Callable[[str], str]]:
    """Swap protected phrases for placeholders; return the text and a restorer.

    All phrases are matched in a single pass, longest first, so a phrase
    nested inside a longer one is restored as part of it and a placeholder
    is never rewritten by a later phrase.
    """
    unique = sorted({p for p in phrases if p}, key=len, reverse=True)
    if not unique:
        return text, lambda masked: masked

    pattern = re.compile("|".join(re.escape(p) for p in unique))
    originals: list[str] = []

    def mask(match: re.Match[str]) -> str:
        originals.append(match.group(0))
        return f"{_MASK_OPEN}{len(originals) - 1}{_MASK_CLOSE}"

    def restore(masked: str) -> str:
        return _MASK_RE.sub(lambda m: originals[int(m.group(1))], masked)

    return pattern.sub(mask, text), restore


def all_phrases_present(text: str, phrases: Sequence[str]) -> bool:
    return all(phrase in text for phrase in phrases)


# ---------------------------------------------------------------------------
# Stage 2: section ranking and abbreviation
# ---------------------------------------------------------------------------


def _rank_section(section: str, config: CompressionConfig) -> _RankedSection:
    """Score *section* with the additive marker rubric.

    Markers are case-sensitive.  The reported type is the last category
    that matched.
    """
    priority = 0
    section_type = "generic"

    if config.maintain_form_priority:
        if "EXACTLY" in section or "CRITICAL NUMERICAL" in section:
            priority += 100
            section_type = "form-critical"
        if "FORM-PRIORITY" in section or "NON-NEGOTIABLE" in section:
            priority += 95
            section_type = "form-priority"
    if "BRAND:" in section or "BRAND INTEGRATION" in section:
        priority += 90
        section_type = "brand"
    if "PRODUCT" in section and ("ARRANGEMENT" in section or "FOCUS" in section):
        priority += 85
        section_type = "product-spec"
    if "VISUAL SCALE" in section or "3D" in section or "REFERENCE" in section:
        priority += 80
        section_type = "3d-visual"
    if "DIMENSIONS" in section or "PHYSICAL" in section:
        priority += 75
        section_type = "physical"
    if "MANUFACTURING" in section or "STRUCTURAL" in section:
        priority += 70
        section_type = "manufacturing"
    if config.preserve_creative_context and (
        "CREATIVE" in section or "STYLE" in section or "AESTHETIC" in section
    ):
        priority += 65
        section_type = "creative"
    if "MATERIAL" in section:
        priority += 60
        section_type = "material"
    if "INSTRUCTION" in section or "GENERATION" in section:
        priority += 30
        section_type = "instruction"

    return _RankedSection(text=section, type=section_type, priority=priority)


def prioritize_sections(sections: Sequence[str], config: CompressionConfig) -> list[_RankedSection]:
    """Rank *sections* by descending priority; ties keep document order."""
    ranked = [_rank_section(s, config) for s in sections]
    return sorted(ranked, key=lambda r: r.priority, reverse=True)


def abbreviate_section(section: str, max_length: int) -> str:
    """Shorten *section* to at most *max_length* characters.

    Keeps the header line, then whole lines while they fit, then, as a
    last resort, one aggressively compressed line.  Returns an empty
    string when even the header does not fit.
    """
    if len(section) <= max_length:
        return section

    lines = section.split("\n")
    if len(lines[0]) > max_length:
        return ""
    abbreviated = lines[0]

    for line in lines[1:]:
        if len(abbreviated) + len(line) + 1 <= max_length:
            abbreviated += "\n" + line
            continue
        if max_length - len(abbreviated) > _MIN_PARTIAL_LINE_SPACE:
            shortened = compress_text(line, CompressionLevel.AGGRESSIVE)
            if len(abbreviated) + len(shortened) + 1 <= max_length:
                abbreviated += "\n" + shortened
        break

    return abbreviated


def _compress_sections(
    prompt: str, config: CompressionConfig, original_length: int
) -> CompressionResult:
    sections = prompt.split(_SEPARATOR)
    phrases = config.protected_content

    protected_sections: list[str] = []
    regular_sections: list[str] = []
    for section in sections[1:]:
        if any(phrase in section for phrase in phrases):
            protected_sections.append(section)
        else:
            regular_sections.append(section)

    compressed = sections[0]
    for section in protected_sections:
        compressed += _SEPARATOR + section

    removed: list[str] = []
    abbreviated: list[str] = []
    for ranked in prioritize_sections(regular_sections, config):
        available = config.max_length - len(compressed) - len(_SEPARATOR)
        if available <= 0:
            removed.append(ranked.type)
            continue
        if len(ranked.text) <= available:
            compressed += _SEPARATOR + ranked.text
            continue
        if available > _MIN_ABBREVIATION_SPACE:
            short = abbreviate_section(ranked.text, available)
            if short:
                compressed += _SEPARATOR + short
                abbreviated.append(f"{ranked.type} ({len(ranked.text)} → {len(short)} chars)")
                continue
        removed.append(ranked.type)

    compressed = compressed.strip()
    return CompressionResult(
        compressed_prompt=compressed,
        original_length=original_length,
        compressed_length=len(compressed),
        compression_ratio=len(compressed) / original_length,
        protected_content_preserved=all_phrases_present(compressed, phrases),
        sections_removed=removed,
        sections_abbreviated=abbreviated,
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def compress_prompt(prompt: str, config: CompressionConfig) -> CompressionResult:
    """Shrink *prompt* to ``config.max_length`` keeping protected phrases.

    A prompt that already fits is returned unchanged with ratio 1.0.
    Protected sections are never shortened, so the output can still
    exceed the limit when they alone are too long.

    Raises:
        ConfigurationError: If ``config.max_length`` is not positive.
    """
    if config.max_length <= 0:
        raise ConfigurationError(f"max_length must be positive, got {config.max_length}")

    original_length = len(prompt)
    if original_length <= config.max_length:
        return CompressionResult(
            compressed_prompt=prompt,
            original_length=original_length,
            compressed_length=original_length,
            compression_ratio=1.0,
            protected_content_preserved=all_phrases_present(prompt, config.protected_content),
        )

    logger.info(
        "compression_start",
        original_length=original_length,
        max_length=config.max_length,
        level=config.compression_level.value,
        protected_phrases=len(config.protected_content),
    )

    masked, restore = _mask_protected(prompt, config.protected_content)
    shrunk = restore(compress_text(masked, config.compression_level))

    if len(shrunk) <= config.max_length:
        logger.info("compression_text_only", compressed_length=len(shrunk))
        return CompressionResult(
            compressed_prompt=shrunk,
            original_length=original_length,
            compressed_length=len(shrunk),
            compression_ratio=len(shrunk) / original_length,
            protected_content_preserved=all_phrases_present(shrunk, config.protected_content),
            sections_abbreviated=[TEXT_COMPRESSION_APPLIED],
        )

    result = _compress_sections(shrunk, config, original_length)
    logger.info(
        "compression_sections",
        compressed_length=result.compressed_length,
        sections_removed=len(result.sections_removed),
        sections_abbreviated=len(result.sections_abbreviated),
        protected_preserved=result.protected_content_preserved,
    )
    return result


def legacy_compress_prompt(prompt: str, max_length: int = DEFAULT_LEGACY_MAX_LENGTH) -> str:
    """Simple section packer kept as the first fallback strategy.

    Keeps the base section, then adds sections ranked by a small marker
    table until one does not fit, which is cut to its first three lines
    if that fits.
    """
    if len(prompt) <= max_length:
        return prompt

    sections = prompt.split(_SEPARATOR)
    compressed = sections[0]

    def score(section: str) -> int:
        return sum(points for marker, points in _LEGACY_MARKERS if marker in section)

    for section in sorted(sections[1:], key=score, reverse=True):
        if len(compressed) + len(section) + len(_SEPARATOR) <= max_length:
            compressed += _SEPARATOR + section
            continue
        head = "\n".join(section.split("\n")[:_LEGACY_ABBREVIATED_LINES])
        if len(compressed) + len(head) + len(_SEPARATOR) <= max_length:
            compressed += _SEPARATOR + head
        break

    return compressed


def truncate_to_boundary(prompt: str, max_length: int) -> str:
    """Cut *prompt* to *max_length* at the last sentence end, else word boundary."""
    if len(prompt) <= max_length:
        return prompt

    head = prompt[:max_length]
    sentence_ends = list(_SENTENCE_END_RE.finditer(head))
    if sentence_ends:
        return head[: sentence_ends[-1].end()]

    word_break = max(head.rfind(" "), head.rfind("\n"))
    if word_break > 0:
        return head[:word_break].rstrip()
    return head


def fallback_compress(prompt: str, max_length: int = DEFAULT_LEGACY_MAX_LENGTH) -> str:
    """Legacy packing, then truncate-to-boundary if that still overflows."""
    packed = legacy_compress_prompt(prompt, max_length)
    if len(packed) > max_length:
        logger.warning("fallback_truncation", length=len(packed), max_length=max_length)
        packed = truncate_to_boundary(packed, max_length)
    return packed
