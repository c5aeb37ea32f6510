from datetime import date

import pytest

from mneme.application.postponement import QuestionPostponementList
from mneme.domain.models import CardType, ParsedQuestion, Question
from mneme.infrastructure.adapters.postponement_store import InMemoryPostponementStore

TODAY = date(2024, 3, 1)


def make_question(text: str) -> Question:
    return Question(note_id="n.md", parsed=ParsedQuestion(CardType.SINGLE_LINE_BASIC, text, 0, 0))


@pytest.mark.asyncio
async def test_load_keeps_ids_from_today():
    q = make_question("A::1")
    store = InMemoryPostponementStore(TODAY, [q.question_id])
    postponed = await QuestionPostponementList.load(store, TODAY)
    assert postponed.contains(q)
    assert len(postponed) == 1


@pytest.mark.asyncio
async def test_load_discards_stale_ids():
    q = make_question("A::1")
    store = InMemoryPostponementStore(date(2024, 2, 29), [q.question_id])
    postponed = await QuestionPostponementList.load(store, TODAY)
    assert not postponed.contains(q)
    assert postponed.day == TODAY


@pytest.mark.asyncio
async def test_add_and_write():
    q = make_question("A::1")
    store = InMemoryPostponementStore()
    postponed = await QuestionPostponementList.load(store, TODAY)
    postponed.add(q)
    postponed.add(q)
    await postponed.write()
    assert store.day == TODAY
    assert store.question_ids == [q.question_id]


def test_contains_only_on_its_day():
    q = make_question("A::1")
    postponed = QuestionPostponementList(InMemoryPostponementStore(), TODAY, [q.question_id])
    assert postponed.contains(q, on=TODAY)
    assert not postponed.contains(q, on=date(2024, 3, 2))
    assert not postponed.contains(make_question("B::2"))


def test_clear_if_stale():
    q = make_question("A::1")
    postponed = QuestionPostponementList(InMemoryPostponementStore(), TODAY, [q.question_id])
    assert not postponed.clear_if_stale(TODAY)
    assert postponed.clear_if_stale(date(2024, 3, 2))
    assert len(postponed) == 0
    assert postponed.day == date(2024, 3, 2)
