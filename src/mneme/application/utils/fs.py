from collections.abc import Iterator
from pathlib import Path


def iter_markdown_files(root: Path) -> Iterator[Path]:
    """Yield every ``*.md`` file below ``root`` in sorted order, skipping hidden directories."""
    if root.is_file():
        if root.suffix.lower() == ".md":
            yield root
        return

    for p in sorted(root.rglob("*.md")):
        rel = p.relative_to(root)
        if any(part.startswith(".") for part in rel.parts[:-1]):
            continue
        if p.is_file():
            yield p
