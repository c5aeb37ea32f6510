"""
Question parser for Markdown note text.

Scans the note line by line and returns the blocks that form questions:

- ``Front::Back`` / ``Front:::Back`` single-line cards (plus a schedule comment
  on the following line),
- multi-line cards whose front and back are split by a line holding only the
  multi-line separator (``?`` / ``??``),
- cloze paragraphs,
- optionally, headings followed by a body enclosed in ``-- --`` lines.

The parser never fails: unterminated code blocks or comments simply run to
the end of the text. Each returned block covers its line range exactly, so
re-joining those lines gives back the block's text.
"""

import logging
import re
from dataclasses import dataclass, field

from mneme.application.cloze import PatternClozeDetector
from mneme.consts import HEADER_CARD_SEPARATOR, SCHEDULE_COMMENT_PREFIX
from mneme.domain import constants as c
from mneme.domain.interfaces import ClozeDetector
from mneme.domain.models import CardType, ParsedQuestion

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"`+|~+")
_HEADING_RE = re.compile(r"^#{1,6}\s+\S")
_BARE_INTEGER_RE = re.compile(r"^\d+$")
_TAG_TOKEN_RE = re.compile(r"^#[\w/-]+$")


@dataclass(frozen=True)
class ParserOptions:
    single_line_card_separator: str = c.DEFAULT_SINGLE_LINE_SEPARATOR
    single_line_reversed_card_separator: str = c.DEFAULT_SINGLE_LINE_REVERSED_SEPARATOR
    multiline_card_separator: str = c.DEFAULT_MULTILINE_SEPARATOR
    multiline_reversed_card_separator: str = c.DEFAULT_MULTILINE_REVERSED_SEPARATOR
    multiline_card_end_marker: str = ""
    cloze_patterns: tuple[str, ...] = field(default_factory=lambda: tuple(c.DEFAULT_CLOZE_PATTERNS))
    heading_as_basic: bool = False
    debug: bool = False


def marker_inside_code_span(text: str, marker: str, marker_index: int) -> bool:
    """True if the marker sits between backticks (odd count on both sides)."""
    before = text[:marker_index].count("`")
    after = text[marker_index + len(marker) :].count("`")
    return before % 2 == 1 and after % 2 == 1


def has_inline_marker(text: str, marker: str) -> bool:
    if not marker:
        return False
    idx = text.find(marker)
    if idx == -1:
        return False
    return not marker_inside_code_span(text, marker, idx)


def is_heading_candidate(trimmed: str) -> bool:
    if _TAG_TOKEN_RE.match(trimmed):
        return False
    return bool(_HEADING_RE.match(trimmed) or _BARE_INTEGER_RE.match(trimmed))


def _block_text(lines: list[str], first: int, last: int) -> str:
    return "\n".join(line.rstrip() for line in lines[first : last + 1]).rstrip()


def _match_header_card(lines: list[str], start: int) -> int | None:
    """
    Look for ``-- --`` body delimiters after the heading at ``start``.

    Returns the last line of the header card (including a trailing schedule
    comment), or None if the body is not closed before the next heading.
    """
    opened = False
    j = start + 1
    while j < len(lines):
        trimmed = lines[j].strip()
        if trimmed.startswith("#") or trimmed == "?":
            return None
        if trimmed == HEADER_CARD_SEPARATOR:
            if opened:
                break
            opened = True
        j += 1
    else:
        return None

    end = j
    k = j + 1
    while k < len(lines) and not lines[k].strip():
        k += 1
    if k < len(lines) and lines[k].strip().startswith(SCHEDULE_COMMENT_PREFIX):
        end = k
    return end


def parse(
    text: str, options: ParserOptions, cloze_detector: ClozeDetector | None = None
) -> list[ParsedQuestion]:
    """
    Return the questions found in ``text``, in order.

    Args:
        text: Note text. Frontmatter should already be blanked out so it is
            not mistaken for card content.
        options: Separator tokens, cloze patterns and toggles.
        cloze_detector: Cloze capability; the pattern detector by default.
    """
    detector = cloze_detector or PatternClozeDetector()
    if options.debug:
        logger.debug(f"Text to parse:\n<<<{text}>>>")

    # Longest separator first, so "::" never shadows ":::"
    inline_separators = sorted(
        [
            (options.single_line_card_separator, CardType.SINGLE_LINE_BASIC),
            (options.single_line_reversed_card_separator, CardType.SINGLE_LINE_REVERSED),
        ],
        key=lambda s: len(s[0]),
        reverse=True,
    )
    patterns = list(options.cloze_patterns)
    end_marker = options.multiline_card_end_marker

    lines = text.replace("\r\n", "\n").split("\n")
    questions: list[ParsedQuestion] = []
    card_type: CardType | None = None
    first_line = 0

    def emit(kind: CardType, first: int, last: int) -> None:
        questions.append(ParsedQuestion(kind, _block_text(lines, first, last), first, last))

    def has_content(first: int, upto: int) -> bool:
        return any(line.strip() for line in lines[first:upto])

    i = 0
    while i < len(lines):
        line = lines[i]
        trimmed = line.strip()

        # HTML comments are carried along but never interpreted
        if line.startswith("<!--") and not line.startswith(SCHEDULE_COMMENT_PREFIX):
            comment_start = i
            while i + 1 < len(lines) and "-->" not in lines[i]:
                i += 1
            # Outside a block the comment is dropped; inside one it stays in the range
            if not has_content(first_line, comment_start):
                first_line = i + 1
            i += 1
            continue

        is_empty = not trimmed
        at_end_marker = bool(end_marker) and trimmed == end_marker
        if (is_empty and not end_marker) or (is_empty and card_type is None) or at_end_marker:
            if card_type is not None:
                emit(card_type, first_line, i - 1)
                card_type = None
            first_line = i + 1
            i += 1
            continue

        inline_type = None
        for separator, kind in inline_separators:
            if has_inline_marker(line, separator):
                inline_type = kind
                break

        if inline_type is not None:
            start = i
            if i + 1 < len(lines) and lines[i + 1].startswith(SCHEDULE_COMMENT_PREFIX):
                i += 1
            emit(inline_type, start, i)
            card_type = None
            first_line = i + 1
        elif options.multiline_card_separator and trimmed == options.multiline_card_separator:
            if has_content(first_line, i):
                card_type = CardType.MULTI_LINE_BASIC
        elif (
            options.multiline_reversed_card_separator
            and trimmed == options.multiline_reversed_card_separator
        ):
            if has_content(first_line, i):
                card_type = CardType.MULTI_LINE_REVERSED
        elif line.startswith("```") or line.startswith("~~~"):
            fence = _FENCE_RE.match(line).group(0)  # type: ignore[union-attr]
            while i + 1 < len(lines) and not lines[i + 1].startswith(fence):
                i += 1
            # Step onto the closing fence
            i += 1
        elif card_type is None and detector.is_cloze_line(line, patterns):
            card_type = CardType.CLOZE
        elif options.heading_as_basic and is_heading_candidate(trimmed):
            end = _match_header_card(lines, i)
            if end is not None:
                if card_type is not None and i > first_line:
                    emit(card_type, first_line, i - 1)
                emit(CardType.HEADER_BASIC, i, end)
                card_type = None
                first_line = end + 1
                i = end

        i += 1

    if card_type is not None and first_line < len(lines):
        emit(card_type, first_line, len(lines) - 1)

    if options.debug:
        logger.debug(f"Parsed questions: {questions}")

    return questions
