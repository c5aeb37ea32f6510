import logging

import pytest

from mneme.application.parser import (
    ParserOptions,
    has_inline_marker,
    is_heading_candidate,
    parse,
)
from mneme.domain.models import CardType, ParsedQuestion

HEADER_NOTE = """# Photosynthesis
-- --
Light energy to chemical energy.

Occurs in chloroplasts.
-- --
<!--SR:!2024-03-05,4,270-->"""

MIXED_NOTE = """#flashcards/bio

Intro paragraph that is not a card.

Cell::Smallest unit of life
<!--SR:!2024-03-05,4,270-->

What does ATP stand for?
?
Adenosine
triphosphate

The ==mitochondria== is the powerhouse of the cell.

```python
x = "a::b"
```

Left:::Right
"""


@pytest.fixture
def opts():
    return ParserOptions()


def test_single_line_basic(opts):
    assert parse("Capital of France::Paris", opts) == [
        ParsedQuestion(CardType.SINGLE_LINE_BASIC, "Capital of France::Paris", 0, 0)
    ]


def test_single_line_consumes_schedule_comment(opts):
    [q] = parse("Q::A\n<!--SR:!2024-03-05,4,270-->\nnext", opts)
    assert (q.first_line, q.last_line) == (0, 1)
    assert q.text == "Q::A\n<!--SR:!2024-03-05,4,270-->"


def test_reversed_separator_wins_over_basic(opts):
    [q] = parse("Left:::Right", opts)
    assert q.card_type is CardType.SINGLE_LINE_REVERSED


def test_separator_inside_code_span_is_ignored(opts):
    assert parse("Use `a::b` syntax", opts) == []
    assert not has_inline_marker("Use `a::b` syntax", "::")
    assert has_inline_marker("`code` then a::b", "::")


def test_multiline_basic(opts):
    [q] = parse("What is X?\n?\nX is Y.\n\nNext", opts)
    assert q.card_type is CardType.MULTI_LINE_BASIC
    assert q.text == "What is X?\n?\nX is Y."
    assert (q.first_line, q.last_line) == (0, 2)


def test_multiline_reversed(opts):
    [q] = parse("Term\n??\nDefinition", opts)
    assert q.card_type is CardType.MULTI_LINE_REVERSED
    assert (q.first_line, q.last_line) == (0, 2)


def test_separator_without_front_is_not_a_card(opts):
    assert parse("?\nanswer", opts) == []


def test_cloze_paragraph(opts):
    [q] = parse("The capital of France is ==Paris==.", opts)
    assert q.card_type is CardType.CLOZE


def test_fenced_code_is_opaque(opts):
    [q] = parse("```\nfoo::bar\n```\nQ::A", opts)
    assert q.text == "Q::A"
    assert q.first_line == 3


def test_blank_line_inside_fence_does_not_end_card(opts):
    [q] = parse("Q\n?\n```\na\n\nb\n```\n", opts)
    assert q.card_type is CardType.MULTI_LINE_BASIC
    assert q.text == "Q\n?\n```\na\n\nb\n```"
    assert q.last_line == 6


def test_unterminated_fence_runs_to_end(opts):
    [q] = parse("Q\n?\n```\ncode", opts)
    assert (q.first_line, q.last_line) == (0, 3)


def test_html_comment_outside_block_is_skipped(opts):
    [q] = parse("<!--\nQ::A\n-->\nReal::Card", opts)
    assert q.text == "Real::Card"
    assert q.first_line == 3


def test_unterminated_comment_yields_nothing(opts):
    assert parse("<!-- open\nQ::A", opts) == []


def test_end_marker_allows_blank_lines():
    opts = ParserOptions(multiline_card_end_marker="+++")
    questions = parse("Q\n?\nline1\n\nline2\n+++\nAfter::x", opts)
    assert [q.card_type for q in questions] == [
        CardType.MULTI_LINE_BASIC,
        CardType.SINGLE_LINE_BASIC,
    ]
    assert questions[0].text == "Q\n?\nline1\n\nline2"
    assert (questions[0].first_line, questions[0].last_line) == (0, 4)
    assert questions[1].first_line == 6


def test_heading_card():
    opts = ParserOptions(heading_as_basic=True)
    [q] = parse(HEADER_NOTE, opts)
    assert q.card_type is CardType.HEADER_BASIC
    assert (q.first_line, q.last_line) == (0, 6)


def test_heading_without_body_delimiters_is_not_a_card():
    opts = ParserOptions(heading_as_basic=True)
    assert parse("# Title\nsome text", opts) == []


def test_heading_cards_disabled_by_default(opts):
    assert parse(HEADER_NOTE, opts) == []


def test_heading_candidates():
    assert is_heading_candidate("# Title")
    assert is_heading_candidate("42")
    assert not is_heading_candidate("#flashcards")
    assert not is_heading_candidate("plain")


def test_mixed_note(opts):
    questions = parse(MIXED_NOTE, opts)
    assert [q.card_type for q in questions] == [
        CardType.SINGLE_LINE_BASIC,
        CardType.MULTI_LINE_BASIC,
        CardType.CLOZE,
        CardType.SINGLE_LINE_REVERSED,
    ]
    assert [(q.first_line, q.last_line) for q in questions] == [(4, 5), (7, 10), (12, 12), (18, 18)]


@pytest.mark.parametrize(
    "text,options,count",
    [
        (MIXED_NOTE, ParserOptions(), 4),
        (HEADER_NOTE, ParserOptions(heading_as_basic=True), 1),
        (
            "# T\n-- --\nbody\n-- --\n\n<!--SR:!2024-03-05,4,270-->",
            ParserOptions(heading_as_basic=True),
            1,
        ),
        ("Q\n?\n<!-- note -->\nA", ParserOptions(), 1),
        ("Q\n?\n```\ncode", ParserOptions(), 1),
        ("Q\n?\nA\n<!-- open\nmore", ParserOptions(), 1),
        (
            "Q\n?\nline1\n\nline2\n+++\nAfter::x",
            ParserOptions(multiline_card_end_marker="+++"),
            2,
        ),
    ],
    ids=[
        "mixed",
        "header",
        "header_blank_before_comment",
        "comment_in_block",
        "unterminated_fence",
        "unterminated_comment",
        "end_marker",
    ],
)
def test_text_matches_line_range(text, options, count):
    lines = text.split("\n")
    questions = parse(text, options)
    assert len(questions) == count
    for q in questions:
        block = "\n".join(line.rstrip() for line in lines[q.first_line : q.last_line + 1])
        assert block.rstrip() == q.text


def test_parse_is_deterministic(opts):
    assert parse(MIXED_NOTE, opts) == parse(MIXED_NOTE, opts)


def test_windows_line_endings(opts):
    [q] = parse("Q::A\r\n<!--SR:!2024-03-05,4,270-->\r\n", opts)
    assert q.last_line == 1


def test_debug_logging(caplog):
    opts = ParserOptions(debug=True)
    with caplog.at_level(logging.DEBUG, logger="mneme.application.parser"):
        parse("Q::A", opts)
    assert "Parsed questions" in caplog.text


def test_no_debug_logging_by_default(caplog, opts):
    with caplog.at_level(logging.DEBUG, logger="mneme.application.parser"):
        parse("Q::A", opts)
    assert caplog.text == ""
