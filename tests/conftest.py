# tests/conftest.py
import sys
import pytest
from datetime import datetime, timedelta, UTC
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.events import EventBus, DomainEvent
from core.store.library_store import LibraryStore
from tests.fakes import InMemorySnapshotRepository, InMemorySettingsRepository, FakeBookSearch

class TickingClock:
    """Clock that advances one minute every time it is read"""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current

@pytest.fixture
def clock():
    return TickingClock()

@pytest.fixture
def repository():
    """An empty in-memory snapshot repository."""
    return InMemorySnapshotRepository()

@pytest.fixture
def events():
    return EventBus()

@pytest.fixture
def recorded_events(events):
    """Every event published on the bus, in order."""
    seen = []
    events.subscribe(DomainEvent, seen.append)
    return seen

@pytest.fixture
def store(repository, events, clock):
    """A LibraryStore over the in-memory repository."""
    return LibraryStore(repository, events=events, clock=clock)

@pytest.fixture
def settings_repository():
    return InMemorySettingsRepository()

@pytest.fixture
def book_search():
    return FakeBookSearch({
        "vol-dune": {
            "id": "vol-dune",
            "title": "Dune",
            "authors": ["Frank Herbert"],
            "categories": ["Fiction"],
            "description": "Desert planet",
            "source": "google-books",
        },
        "vol-emma": {
            "id": "vol-emma",
            "title": "Emma",
            "authors": ["Jane Austen"],
            "categories": ["Classics"],
        },
    })

@pytest.fixture
def sample_books():
    """Three books with searchable metadata."""
    return [
        {
            "id": "b1",
            "title": "Dune",
            "authors": ["Frank Herbert"],
            "description": "A desert planet and its spice",
            "categories": ["Science Fiction"],
            "rating": 5,
            "dateAdded": "2024-01-03T10:00:00+00:00",
        },
        {
            "id": "b2",
            "title": "The Left Hand of Darkness",
            "authors": ["Ursula K. Le Guin"],
            "description": "An envoy on a frozen planet",
            "categories": ["Science Fiction"],
            "rating": 4,
            "dateAdded": "2023-06-01T08:30:00+00:00",
        },
        {
            "id": "b3",
            "title": "Pride and Prejudice",
            "authors": ["Jane Austen"],
            "description": "Manners, marriage and the Bennet family",
            "categories": ["Classics", "Romance"],
            "rating": 0,
            "dateAdded": "2024-02-10T09:15:00+00:00",
        },
    ]

@pytest.fixture
def populated_store(store, sample_books):
    """Store with b1 and b2 in to-read and b3 in read."""
    store.add_book("to-read", sample_books[0])
    store.add_book("to-read", sample_books[1])
    store.add_book("read", sample_books[2])
    return store
