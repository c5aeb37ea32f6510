"""
Cloze detection from pattern templates.

A template describes how a deletion is written in a note, e.g.
``==[123;;]answer[;;hint]==``:

- ``answer`` stands for the hidden text,
- ``[123;;]`` is an optional sequence number grouping deletions into one card,
- ``[;;hint]`` is an optional hint shown in place of the answer.

Everything else in the template is matched literally.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

_OPTIONAL_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")


@dataclass(frozen=True)
class ClozeMatch:
    start: int
    end: int
    answer: str
    hint: str | None
    seq: int | None


def _compile_fragment(fragment: str, inside_optional: bool) -> str:
    out = []
    i = 0
    while i < len(fragment):
        if not inside_optional and fragment.startswith("answer", i):
            out.append(r"(?P<answer>.+?)")
            i += len("answer")
        elif inside_optional and fragment.startswith("123", i):
            out.append(r"(?P<seq>\d+)")
            i += len("123")
        elif inside_optional and fragment.startswith("hint", i):
            out.append(r"(?P<hint>.+?)")
            i += len("hint")
        else:
            out.append(re.escape(fragment[i]))
            i += 1
    return "".join(out)


@lru_cache(maxsize=64)
def compile_pattern(template: str) -> re.Pattern[str]:
    """Turn a cloze template into a regular expression."""
    parts = []
    pos = 0
    for m in _OPTIONAL_SEGMENT_RE.finditer(template):
        parts.append(_compile_fragment(template[pos : m.start()], inside_optional=False))
        parts.append("(?:" + _compile_fragment(m.group(1), inside_optional=True) + ")?")
        pos = m.end()
    parts.append(_compile_fragment(template[pos:], inside_optional=False))
    return re.compile("".join(parts))


class PatternClozeDetector:
    """Default cloze-detection capability used by the parser and card builder."""

    def is_cloze_line(self, line: str, patterns: list[str] | tuple[str, ...]) -> bool:
        return any(compile_pattern(p).search(line) for p in patterns if p)

    def find_clozes(self, text: str, patterns: list[str] | tuple[str, ...]) -> list[ClozeMatch]:
        """
        Find every deletion in ``text``, in order of appearance.

        When templates overlap on the same span, the earlier template wins.
        """
        found: list[ClozeMatch] = []
        for p in patterns:
            if not p:
                continue
            for m in compile_pattern(p).finditer(text):
                if any(m.start() < f.end and f.start < m.end() for f in found):
                    continue
                groups = m.groupdict()
                seq = groups.get("seq")
                found.append(
                    ClozeMatch(
                        start=m.start(),
                        end=m.end(),
                        answer=groups["answer"],
                        hint=groups.get("hint"),
                        seq=int(seq) if seq else None,
                    )
                )
        return sorted(found, key=lambda f: f.start)
