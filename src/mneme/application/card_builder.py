"""
Builds questions and cards from parsed question blocks.

Splits each block into front/back pairs according to its type and attaches
the schedules stored in the block's ``<!--SR:...-->`` comment.
"""

import logging
import re
from datetime import date

from mneme.application.cloze import ClozeMatch, PatternClozeDetector
from mneme.application.parser import ParserOptions, marker_inside_code_span, parse
from mneme.application.utils.text import blank_out_frontmatter, find_flashcard_tags
from mneme.consts import HEADER_CARD_SEPARATOR
from mneme.domain.constants import CLOZE_PLACEHOLDER
from mneme.domain.models import Card, CardType, ParsedQuestion, Question
from mneme.domain.schedule import parse_schedule_comment, split_schedule_comment
from mneme.domain.topic_path import TopicPath

logger = logging.getLogger(__name__)

_LEADING_TAG_RE = re.compile(r"^\s*(#[\w/-]+)\s*")
_HEADING_MARK_RE = re.compile(r"^#+\s+")


def _split_inline(text: str, separator: str) -> tuple[str, str]:
    start = 0
    while True:
        idx = text.find(separator, start)
        if idx == -1:
            return text, ""
        if not marker_inside_code_span(text, separator, idx):
            return text[:idx].strip(), text[idx + len(separator) :].strip()
        start = idx + 1


def _split_multiline(text: str, separator: str) -> tuple[str, str]:
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if line.strip() == separator:
            return "\n".join(lines[:i]).strip(), "\n".join(lines[i + 1 :]).strip()
    return text, ""


class CardBuilder:
    def __init__(
        self,
        options: ParserOptions,
        flashcard_tags: list[str],
        comment_on_same_line: bool = False,
        cloze_detector: PatternClozeDetector | None = None,
    ):
        self.options = options
        self.flashcard_tags = flashcard_tags
        self.comment_on_same_line = comment_on_same_line
        self.cloze_detector = cloze_detector or PatternClozeDetector()

    def build_note_questions(self, note_id: str, note_text: str, today: date) -> list[Question]:
        """
        Parse a note and return its questions with their cards.

        Notes without a flashcard tag yield nothing.
        """
        note_path = self._note_topic_path(note_text)
        body = blank_out_frontmatter(note_text)
        questions = []
        for parsed in parse(body, self.options, self.cloze_detector):
            topic_path = self._question_topic_path(parsed.text) or note_path
            if topic_path is None:
                continue
            question = self.build_question(note_id, parsed, topic_path, today)
            if question.cards:
                questions.append(question)
            else:
                logger.debug(f"[cards] {note_id}:{parsed.first_line} produced no cards")
        return questions

    def build_question(
        self, note_id: str, parsed: ParsedQuestion, topic_path: TopicPath, today: date
    ) -> Question:
        question = Question(
            note_id=note_id,
            parsed=parsed,
            topic_path=topic_path,
            comment_on_same_line=self.comment_on_same_line,
        )
        text, comment = split_schedule_comment(parsed.text)
        text = self._strip_leading_tag(text)
        schedules = parse_schedule_comment(comment, today=today) if comment else []

        sides = self._card_sides(parsed.card_type, text)
        cards = []
        for i, (front, back) in enumerate(sides):
            schedule = schedules[i] if i < len(schedules) else None
            cards.append(Card(card_index=i, front=front, back=back, schedule=schedule))
        question.set_cards(cards)
        return question

    # ---------- Sides ----------

    def _card_sides(self, card_type: CardType, text: str) -> list[tuple[str, str]]:
        o = self.options
        if card_type is CardType.SINGLE_LINE_BASIC:
            front, back = _split_inline(text, o.single_line_card_separator)
            return [(front, back)]
        if card_type is CardType.SINGLE_LINE_REVERSED:
            front, back = _split_inline(text, o.single_line_reversed_card_separator)
            return [(front, back), (back, front)]
        if card_type is CardType.MULTI_LINE_BASIC:
            front, back = _split_multiline(text, o.multiline_card_separator)
            return [(front, back)]
        if card_type is CardType.MULTI_LINE_REVERSED:
            front, back = _split_multiline(text, o.multiline_reversed_card_separator)
            return [(front, back), (back, front)]
        if card_type is CardType.CLOZE:
            return self._cloze_sides(text)
        return [self._header_sides(text)]

    def _cloze_sides(self, text: str) -> list[tuple[str, str]]:
        matches = self.cloze_detector.find_clozes(text, list(self.options.cloze_patterns))

        # Deletions sharing a sequence number are hidden together
        groups: list[list[ClozeMatch]] = []
        by_seq: dict[int, list[ClozeMatch]] = {}
        for m in matches:
            if m.seq is None:
                groups.append([m])
            elif m.seq in by_seq:
                by_seq[m.seq].append(m)
            else:
                by_seq[m.seq] = [m]
                groups.append(by_seq[m.seq])

        sides = []
        for group in groups:
            front = self._render_cloze(text, matches, group, reveal=False)
            back = self._render_cloze(text, matches, group, reveal=True)
            sides.append((front, back))
        return sides

    @staticmethod
    def _render_cloze(
        text: str, matches: list[ClozeMatch], hidden: list[ClozeMatch], reveal: bool
    ) -> str:
        out = []
        pos = 0
        for m in matches:
            out.append(text[pos : m.start])
            if any(m is h for h in hidden):
                if reveal:
                    out.append(f"**{m.answer}**")
                else:
                    out.append(f"[{m.hint}]" if m.hint else CLOZE_PLACEHOLDER)
            else:
                out.append(m.answer)
            pos = m.end
        out.append(text[pos:])
        return "".join(out)

    @staticmethod
    def _header_sides(text: str) -> tuple[str, str]:
        lines = text.split("\n")
        front = _HEADING_MARK_RE.sub("", lines[0].strip()).strip()
        seps = [i for i, line in enumerate(lines) if line.strip() == HEADER_CARD_SEPARATOR]
        if len(seps) >= 2:
            back = "\n".join(lines[seps[0] + 1 : seps[1]]).strip()
        else:
            back = "\n".join(lines[1:]).strip()
        return front, back

    # ---------- Topic paths ----------

    def _note_topic_path(self, note_text: str) -> TopicPath | None:
        for tag in find_flashcard_tags(note_text):
            path = self._topic_path_for_tag(tag)
            if path is not None:
                return path
        return None

    def _question_topic_path(self, text: str) -> TopicPath | None:
        m = _LEADING_TAG_RE.match(text)
        if not m:
            return None
        return self._topic_path_for_tag(m.group(1))

    def _topic_path_for_tag(self, tag: str) -> TopicPath | None:
        for deck_tag in self.flashcard_tags:
            path = TopicPath.from_tag(tag, deck_tag)
            if path is not None:
                return path
        return None

    def _strip_leading_tag(self, text: str) -> str:
        m = _LEADING_TAG_RE.match(text)
        if m and self._topic_path_for_tag(m.group(1)) is not None:
            return text[m.end() :]
        return text
