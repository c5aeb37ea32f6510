import logging
import re
from typing import Any

import yaml  # type: ignore
import yaml.constructor

logger = logging.getLogger(__name__)

# Inline tags: "#tag" or "#tag/sub", not part of a word or a heading marker
_INLINE_TAG_RE = re.compile(r"(?:^|(?<=\s))(#[^\s#`,;.!?()\[\]{}]+)")
_CODE_FENCE_RE = re.compile(r"^(```|~~~)")


# ---------- Frontmatter helpers ----------


def _frontmatter_end(lines: list[str]) -> int | None:
    """Index of the closing ``---`` line, or None if the note has no frontmatter."""
    if not lines or lines[0].strip() != "---":
        return None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return i
    return None


def parse_frontmatter(md_text: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from markdown text.
    Uses line-by-line parsing instead of regex for reliability.
    """
    # Handle potential BOM (Byte Order Mark)
    md_text = md_text.lstrip("\ufeff")

    lines = md_text.split("\n")
    yaml_end_line = _frontmatter_end(lines)
    if yaml_end_line is None:
        return {}, md_text

    raw = "\n".join(lines[1:yaml_end_line])
    body = "\n".join(lines[yaml_end_line + 1 :])

    # Fix tabs (common user error)
    if "\t" in raw:
        raw = raw.replace("\t", "  ")

    try:
        meta = yaml.load(raw, Loader=UniqueKeyLoader) or {}
    except yaml.YAMLError as e:
        return {"__yaml_error__": str(e)}, md_text

    if not isinstance(meta, dict):
        return {"__yaml_error__": "frontmatter is not a mapping"}, md_text
    return meta, body


class UniqueKeyLoader(yaml.SafeLoader):
    """Custom YAML loader that forbids duplicate keys."""

    def construct_mapping(self, node, deep=False):
        mapping = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in mapping:
                raise yaml.constructor.ConstructorError(
                    None, None, f"found duplicate key '{key}'", key_node.start_mark
                )
            mapping.add(key)
        return super().construct_mapping(node, deep)


def blank_out_frontmatter(md_text: str) -> str:
    """Replace frontmatter lines with empty lines so line numbers are unchanged."""
    lines = md_text.split("\n")
    end = _frontmatter_end([lines[0].lstrip("\ufeff")] + lines[1:] if lines else lines)
    if end is None:
        return md_text
    return "\n".join([""] * (end + 1) + lines[end + 1 :])


# ---------- Tags ----------


def _frontmatter_tags(meta: dict[str, Any]) -> list[str]:
    tags = meta.get("tags") or meta.get("tag") or []
    if isinstance(tags, str):
        tags = re.split(r"[,\s]+", tags)
    if not isinstance(tags, list):
        return []
    result = []
    for t in tags:
        if t is None:
            continue
        t = str(t).strip()
        if t:
            result.append(t if t.startswith("#") else f"#{t}")
    return result


def find_flashcard_tags(md_text: str) -> list[str]:
    """
    Collect a note's tags in order: frontmatter ``tags`` first, then inline
    tags from the body. Tags inside fenced code blocks are ignored.
    """
    meta, body = parse_frontmatter(md_text)
    if "__yaml_error__" in meta:
        logger.debug(f"Ignoring unparsable frontmatter: {meta['__yaml_error__']}")
        meta = {}

    tags = _frontmatter_tags(meta)
    in_code = False
    for line in body.split("\n"):
        if _CODE_FENCE_RE.match(line):
            in_code = not in_code
            continue
        if in_code:
            continue
        tags.extend(_INLINE_TAG_RE.findall(line))
    return tags
