from dataclasses import dataclass


@dataclass(frozen=True)
class TopicPath:
    """
    Ordered deck path, e.g. ``science/physics`` from the tag ``#flashcards/science/physics``.

    The empty path addresses the root of a deck tree.
    """

    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, path: str) -> "TopicPath":
        return cls(tuple(s for s in path.strip().strip("/").split("/") if s))

    @classmethod
    def from_tag(cls, tag: str, deck_tag: str) -> "TopicPath | None":
        """
        Convert a tag into a topic path relative to ``deck_tag``.

        Returns None when ``tag`` is not ``deck_tag`` or one of its children.
        """
        tag = tag if tag.startswith("#") else f"#{tag}"
        deck_tag = deck_tag if deck_tag.startswith("#") else f"#{deck_tag}"
        if tag == deck_tag:
            return cls()
        if tag.startswith(deck_tag + "/"):
            return cls.parse(tag[len(deck_tag) + 1 :])
        return None

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return "/".join(self.segments)


EMPTY_TOPIC_PATH = TopicPath()
