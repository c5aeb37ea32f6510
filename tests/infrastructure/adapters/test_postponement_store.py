import json
from datetime import date

import pytest

from mneme.infrastructure.adapters.postponement_store import JsonPostponementStore
from mneme.infrastructure.clock import FixedClock


@pytest.mark.asyncio
async def test_missing_file_loads_empty(tmp_path):
    store = JsonPostponementStore(tmp_path / "postponed.json")
    assert await store.load() == (None, [])


@pytest.mark.asyncio
async def test_save_and_load(tmp_path):
    path = tmp_path / ".mneme" / "postponed.json"
    store = JsonPostponementStore(path)
    await store.save(date(2024, 3, 1), ["abc", "def"])

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "day": "2024-03-01",
        "questions": ["abc", "def"],
    }
    assert await store.load() == (date(2024, 3, 1), ["abc", "def"])


@pytest.mark.asyncio
async def test_corrupt_file_is_ignored(tmp_path, caplog):
    path = tmp_path / "postponed.json"
    path.write_text("{not json", encoding="utf-8")
    assert await JsonPostponementStore(path).load() == (None, [])
    assert "unreadable postponement file" in caplog.text


def test_fixed_clock_advance():
    clock = FixedClock(date(2024, 3, 1))
    assert clock.advance() == date(2024, 3, 2)
    assert clock.advance(7) == date(2024, 3, 9)
    assert clock.today() == date(2024, 3, 9)
