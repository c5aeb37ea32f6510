"""
Iteration over the cards of a deck tree.

The iterator walks a (remaining) deck tree narrowed to a topic path and
keeps track of the current card. Removing or re-queueing the current card
is done through the iterator so the queue and the tree stay in step.
"""

import logging
import random
from enum import Enum

from mneme.domain.deck import Deck
from mneme.domain.models import Card, CardListType
from mneme.domain.topic_path import EMPTY_TOPIC_PATH, TopicPath

logger = logging.getLogger(__name__)


class CardOrder(str, Enum):
    NEW_FIRST_SEQUENTIAL = "new_first_sequential"
    DUE_FIRST_SEQUENTIAL = "due_first_sequential"
    NEW_FIRST_RANDOM = "new_first_random"
    DUE_FIRST_RANDOM = "due_first_random"

    @property
    def is_random(self) -> bool:
        return self in (CardOrder.NEW_FIRST_RANDOM, CardOrder.DUE_FIRST_RANDOM)

    @property
    def list_priority(self) -> tuple[CardListType, CardListType]:
        if self in (CardOrder.NEW_FIRST_SEQUENTIAL, CardOrder.NEW_FIRST_RANDOM):
            return (CardListType.NEW, CardListType.DUE)
        return (CardListType.DUE, CardListType.NEW)


class DeckOrder(str, Enum):
    PREV_DECK_COMPLETE_SEQUENTIAL = "prev_deck_complete_sequential"
    EVERY_CARD_RANDOM_DECK = "every_card_random_deck"


class DeckTreeIterator:
    def __init__(
        self,
        card_order: CardOrder = CardOrder.DUE_FIRST_SEQUENTIAL,
        deck_order: DeckOrder = DeckOrder.PREV_DECK_COMPLETE_SEQUENTIAL,
        rng: random.Random | None = None,
    ):
        self.card_order = card_order
        self.deck_order = deck_order
        self.rng = rng or random.Random()
        self._base_deck: Deck | None = None
        self._topic_path: TopicPath = EMPTY_TOPIC_PATH
        self._deck: Deck | None = None
        self._current_card: Card | None = None
        self._current_deck: Deck | None = None

    @property
    def current_card(self) -> Card | None:
        return self._current_card

    @property
    def current_deck(self) -> Deck | None:
        """The deck node holding the current card, or None when there is none."""
        return self._current_deck

    @property
    def iterator_deck(self) -> Deck | None:
        """The subtree the iterator is narrowed to."""
        return self._deck

    @property
    def topic_path(self) -> TopicPath:
        return self._topic_path

    def set_base_deck(self, base_deck: Deck) -> None:
        self._base_deck = base_deck
        self._deck = None
        self._current_card = None
        self._current_deck = None

    def set_iterator_topic_path(self, topic_path: TopicPath) -> None:
        self._topic_path = topic_path
        self._deck = self._base_deck.get_deck(topic_path) if self._base_deck else None
        self._current_card = None
        self._current_deck = None
        if self._base_deck is not None and self._deck is None:
            logger.info(f"Deck '{topic_path}' not found; nothing to review")

    def next_card(self) -> bool:
        """Advance to the next card. Returns False when the subtree is exhausted."""
        self._current_card = None
        self._current_deck = None
        if self._deck is None:
            return False

        candidates = [d for d in self._deck.walk() if not d.is_empty_node]
        if not candidates:
            return False

        if self.deck_order is DeckOrder.EVERY_CARD_RANDOM_DECK:
            deck = self.rng.choice(candidates)
        else:
            deck = candidates[0]

        for list_type in self.card_order.list_priority:
            cards = deck.card_list(list_type)
            if cards:
                card = self.rng.choice(cards) if self.card_order.is_random else cards[0]
                self._current_card = card
                self._current_deck = deck
                return True
        return False

    def delete_current_card_from_all_decks(self) -> None:
        if self._current_card is None or self._base_deck is None:
            return
        self._base_deck.delete_card_from_tree(self._current_card)
        self.next_card()

    def delete_current_question_from_all_decks(self) -> None:
        if self._current_card is None or self._base_deck is None:
            return
        question = self._current_card.question
        if question is None:
            self._base_deck.delete_card_from_tree(self._current_card)
        else:
            self._base_deck.delete_question_from_tree(question)
        self.next_card()

    def move_current_card_to_end_of_list(self) -> None:
        card, deck = self._current_card, self._current_deck
        if card is None or deck is None:
            return
        for cards in (deck.new_cards, deck.due_cards):
            if any(c is card for c in cards):
                cards[:] = [c for c in cards if c is not card]
                cards.append(card)
                return
