from datetime import date

import pytest

from mneme.application.card_builder import CardBuilder
from mneme.application.config import AppConfig
from mneme.application.parser import ParserOptions
from mneme.infrastructure.adapters.note_store import InMemoryNoteStore
from mneme.infrastructure.adapters.postponement_store import InMemoryPostponementStore
from mneme.infrastructure.clock import FixedClock

TODAY = date(2024, 3, 1)

# One new card, one due today, one due in nine days.
GEOGRAPHY_NOTE = """#flashcards/geo

Capital of France::Paris

Capital of Italy::Rome
<!--SR:!2024-03-01,10,250-->

Capital of Spain::Madrid
<!--SR:!2024-03-10,10,250-->
"""


@pytest.fixture
def mock_vault(tmp_path):
    """Creates a temporary directory structure mimicking a vault."""
    d = tmp_path / "MyVault"
    d.mkdir()
    return d


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for key in ("MNEME_VAULT_ROOT", "MNEME_BURY_SIBLING_CARDS", "MNEME_BASE_EASE"):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def options():
    return ParserOptions()


@pytest.fixture
def builder(options):
    return CardBuilder(options=options, flashcard_tags=["#flashcards"])


@pytest.fixture
def note_store():
    return InMemoryNoteStore({"geo.md": GEOGRAPHY_NOTE})


@pytest.fixture
def postponement_store():
    return InMemoryPostponementStore()


@pytest.fixture
def config(mock_home, mock_vault):
    return AppConfig(vault_root=mock_vault)
