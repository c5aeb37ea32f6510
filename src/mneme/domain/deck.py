"""
Hierarchical deck tree.

A deck node owns two card lists: ``new_cards`` and ``due_cards``. In the
original tree ``due_cards`` holds every scheduled card; in a remaining tree
produced by ``DeckTreeFilter`` it holds only cards that are due on the
review date.
"""

from collections.abc import Callable, Iterator
from datetime import date

from mneme.domain.models import Card, CardListType, Question, ReviewMode
from mneme.domain.topic_path import TopicPath


class Deck:
    def __init__(self, name: str, parent: "Deck | None" = None):
        self.name = name
        self.parent = parent
        self.subdecks: list[Deck] = []
        self.new_cards: list[Card] = []
        self.due_cards: list[Card] = []

    # ---------- Structure ----------

    @property
    def topic_path(self) -> TopicPath:
        names: list[str] = []
        deck: Deck | None = self
        while deck is not None and deck.parent is not None:
            names.append(deck.name)
            deck = deck.parent
        return TopicPath(tuple(reversed(names)))

    def get_or_create_deck(self, topic_path: TopicPath) -> "Deck":
        deck = self
        for name in topic_path.segments:
            child = deck.get_subdeck(name)
            if child is None:
                child = Deck(name, parent=deck)
                deck.subdecks.append(child)
            deck = child
        return deck

    def get_subdeck(self, name: str) -> "Deck | None":
        for d in self.subdecks:
            if d.name == name:
                return d
        return None

    def get_deck(self, topic_path: TopicPath) -> "Deck | None":
        """Find the node at ``topic_path`` below this one, or None if absent."""
        deck: Deck | None = self
        for name in topic_path.segments:
            deck = deck.get_subdeck(name) if deck is not None else None
        return deck

    def walk(self) -> Iterator["Deck"]:
        """Pre-order traversal: this deck, then each subdeck in order."""
        yield self
        for d in self.subdecks:
            yield from d.walk()

    # ---------- Cards ----------

    def append_card(self, topic_path: TopicPath, card: Card) -> None:
        deck = self.get_or_create_deck(topic_path)
        if card.is_new:
            deck.new_cards.append(card)
        else:
            deck.due_cards.append(card)

    def card_list(self, list_type: CardListType) -> list[Card]:
        if list_type is CardListType.NEW:
            return self.new_cards
        if list_type is CardListType.DUE:
            return self.due_cards
        return self.new_cards + self.due_cards

    def get_card_count(self, list_type: CardListType, include_subdecks: bool) -> int:
        decks = self.walk() if include_subdecks else iter([self])
        return sum(len(d.card_list(list_type)) for d in decks)

    def get_distinct_card_count(self, list_type: CardListType, include_subdecks: bool) -> int:
        decks = self.walk() if include_subdecks else iter([self])
        seen: set[int] = set()
        for d in decks:
            seen.update(id(c) for c in d.card_list(list_type))
        return len(seen)

    def get_question_card_count(self, question: Question) -> int:
        """Cards of ``question`` still held directly in this deck."""
        return sum(1 for c in self.new_cards + self.due_cards if c.question is question)

    def delete_card(self, card: Card) -> bool:
        for cards in (self.new_cards, self.due_cards):
            for i, c in enumerate(cards):
                if c is card:
                    del cards[i]
                    return True
        return False

    def delete_card_from_tree(self, card: Card) -> None:
        for d in self.walk():
            d.delete_card(card)

    def delete_question_from_tree(self, question: Question) -> None:
        for d in self.walk():
            d.new_cards = [c for c in d.new_cards if c.question is not question]
            d.due_cards = [c for c in d.due_cards if c.question is not question]

    @property
    def is_empty_node(self) -> bool:
        """No cards directly in this node (subdecks are not considered)."""
        return not self.new_cards and not self.due_cards

    @property
    def is_empty(self) -> bool:
        return self.get_card_count(CardListType.ALL, include_subdecks=True) == 0

    # ---------- Copying ----------

    def clone(self) -> "Deck":
        """Copy the structure and card lists. Cards themselves are shared."""
        return self.copy_with_filter(lambda _card, _list_type: _list_type)

    def copy_with_filter(
        self,
        classify: Callable[[Card, CardListType], CardListType | None],
        parent: "Deck | None" = None,
    ) -> "Deck":
        """
        Copy the tree, routing each card through ``classify``.

        ``classify`` receives the card and the list it currently sits in and
        returns the list it belongs to in the copy, or None to drop it. Empty
        nodes are kept so topic paths stay valid in the copy.
        """
        result = Deck(self.name, parent=parent)
        for list_type, cards in (
            (CardListType.NEW, self.new_cards),
            (CardListType.DUE, self.due_cards),
        ):
            for card in cards:
                target = classify(card, list_type)
                if target is CardListType.NEW:
                    result.new_cards.append(card)
                elif target is CardListType.DUE:
                    result.due_cards.append(card)
        for d in self.subdecks:
            result.subdecks.append(d.copy_with_filter(classify, parent=result))
        return result

    def __repr__(self) -> str:
        return (
            f"Deck({str(self.topic_path) or '<root>'}, new={len(self.new_cards)}, "
            f"due={len(self.due_cards)}, subdecks={len(self.subdecks)})"
        )


class DeckTreeFilter:
    @staticmethod
    def filter_for_remaining_cards(
        postponed: Callable[[Question], bool],
        deck_tree: Deck,
        review_mode: ReviewMode,
        today: date,
    ) -> Deck:
        """
        Build the live review queue from ``deck_tree``.

        Review mode keeps new cards and cards due on ``today``; cram mode
        keeps every card. Cards of postponed questions are always dropped.
        Cards are re-classified by their current schedule, so a card
        rescheduled during the session lands in the right list.
        """

        def classify(card: Card, _list_type: CardListType) -> CardListType | None:
            if card.question is not None and postponed(card.question):
                return None
            if card.is_new:
                return CardListType.NEW
            if review_mode is ReviewMode.CRAM or card.is_due(today):
                return CardListType.DUE
            return None

        return deck_tree.copy_with_filter(classify)
