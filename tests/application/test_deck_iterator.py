import random
from datetime import date

from mneme.application.deck_iterator import CardOrder, DeckOrder, DeckTreeIterator
from mneme.domain.deck import Deck
from mneme.domain.models import Card, CardType, ParsedQuestion, Question
from mneme.domain.schedule import ScheduleInfo
from mneme.domain.topic_path import EMPTY_TOPIC_PATH, TopicPath

DUE = ScheduleInfo(date(2024, 3, 1), 3, 250)


def add_question(root: Deck, topic: str, n_cards: int = 1, schedule=None) -> Question:
    parsed = ParsedQuestion(CardType.SINGLE_LINE_REVERSED, f"{topic}:::x", 0, 0)
    q = Question(note_id=f"{topic}.md", parsed=parsed, topic_path=TopicPath.parse(topic))
    q.set_cards([Card(i, f"{topic}-{i}", "x", schedule=schedule) for i in range(n_cards)])
    for card in q.cards:
        root.append_card(q.topic_path, card)
    return q


def make_iterator(root: Deck, card_order=CardOrder.DUE_FIRST_SEQUENTIAL) -> DeckTreeIterator:
    it = DeckTreeIterator(card_order=card_order, rng=random.Random(0))
    it.set_base_deck(root)
    it.set_iterator_topic_path(EMPTY_TOPIC_PATH)
    return it


def test_due_first_sequential():
    root = Deck("root")
    add_question(root, "a")
    due = add_question(root, "a", schedule=DUE)
    it = make_iterator(root)
    assert it.next_card()
    assert it.current_card is due.cards[0]
    assert it.current_deck is root.get_deck(TopicPath.parse("a"))


def test_new_first_sequential():
    root = Deck("root")
    new = add_question(root, "a")
    add_question(root, "a", schedule=DUE)
    it = make_iterator(root, CardOrder.NEW_FIRST_SEQUENTIAL)
    it.next_card()
    assert it.current_card is new.cards[0]


def test_previous_deck_is_completed_first():
    root = Deck("root")
    a = add_question(root, "a")
    b = add_question(root, "b")
    it = make_iterator(root)
    it.next_card()
    assert it.current_card is a.cards[0]
    it.delete_current_card_from_all_decks()
    assert it.current_card is b.cards[0]
    it.delete_current_card_from_all_decks()
    assert it.current_card is None
    assert not it.next_card()


def test_topic_path_narrows_iteration():
    root = Deck("root")
    add_question(root, "a")
    b = add_question(root, "b")
    it = make_iterator(root)
    it.set_iterator_topic_path(TopicPath.parse("b"))
    it.next_card()
    assert it.current_card is b.cards[0]


def test_missing_topic_path_has_no_cards():
    root = Deck("root")
    add_question(root, "a")
    it = make_iterator(root)
    it.set_iterator_topic_path(TopicPath.parse("nope"))
    assert not it.next_card()
    assert it.iterator_deck is None


def test_move_current_card_to_end():
    root = Deck("root")
    q = add_question(root, "a", n_cards=2)
    it = make_iterator(root)
    it.next_card()
    first = it.current_card
    it.move_current_card_to_end_of_list()
    # Moving does not advance
    assert it.current_card is first
    it.next_card()
    assert it.current_card is q.cards[1]


def test_delete_current_question_removes_siblings():
    root = Deck("root")
    add_question(root, "a", n_cards=2)
    it = make_iterator(root)
    it.next_card()
    it.delete_current_question_from_all_decks()
    assert it.current_card is None
    assert root.is_empty


def test_random_orders_visit_every_card():
    root = Deck("root")
    cards = [c for t in ("a", "b", "c") for c in add_question(root, t, n_cards=2).cards]
    it = DeckTreeIterator(
        card_order=CardOrder.NEW_FIRST_RANDOM,
        deck_order=DeckOrder.EVERY_CARD_RANDOM_DECK,
        rng=random.Random(42),
    )
    it.set_base_deck(root)
    it.set_iterator_topic_path(EMPTY_TOPIC_PATH)
    seen = []
    it.next_card()
    while it.current_card is not None:
        seen.append(it.current_card)
        it.delete_current_card_from_all_decks()
    assert len(seen) == len(cards)
    assert all(any(s is c for s in seen) for c in cards)
