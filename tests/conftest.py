"""
Shared test fixtures and configuration for entire test suite.

Provides: Settings factories, temp-file and in-memory record stores,
sample page documents, record factories
Dependencies: pytest, pytest-asyncio, sqlalchemy, bs4
System role: Test infrastructure and fixture management
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from anchorkit.application.services.record_store import RecordStore
from anchorkit.boundary.dom.page_document import PageDocument
from anchorkit.configs import (
    AnchoringSettings,
    DatabaseSettings,
    MarkerSettings,
    Settings,
    WatcherSettings,
)
from anchorkit.core.text_hasher import hash_text
from anchorkit.models.annotation import (
    AnnotationContext,
    AnnotationKind,
    AnnotationRecord,
    AnnotationStatus,
)

PAGE_URL = "https://example.com/articles/reanchoring"

SAMPLE_HTML = """
<html>
  <head><title>Sample Article</title></head>
  <body>
    <article id="story">
      <h1>Reanchoring annotations</h1>
      <p id="intro" class="lead">The quick brown fox jumps over the lazy dog near the river bank.</p>
      <p id="second">Annotations must survive page reloads and structural edits made by scripts.</p>
      <div class="aside"><span>short</span></div>
    </article>
  </body>
</html>
"""


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of a throwaway SQLite database file."""
    return tmp_path / "anchorkit_test.db"


@pytest.fixture
def db_settings(db_path: Path) -> DatabaseSettings:
    """Database settings pointing at a temp-file SQLite database."""
    return DatabaseSettings(url=f"sqlite+aiosqlite:///{db_path}")


@pytest.fixture
def settings(db_settings: DatabaseSettings) -> Settings:
    """
    Application settings tuned for fast tests.

    Debounce is short and the interval trigger is disabled so
    reconciliation only runs when a test asks for it.
    """
    return Settings(
        database=db_settings,
        anchoring=AnchoringSettings(),
        marker=MarkerSettings(),
        watcher=WatcherSettings(debounce_seconds=0.05, interval_seconds=0),
    )


@pytest.fixture
async def store(db_settings: DatabaseSettings):
    """
    Initialized record store over a temp-file database.

    Yields:
        RecordStore: Ready store, closed after the test
    """
    record_store = RecordStore(db_settings)
    await record_store.initialize()
    yield record_store
    await record_store.close()


@pytest.fixture
async def memory_store():
    """
    Initialized record store over in-memory SQLite.

    Yields:
        RecordStore: Ready store, closed after the test
    """
    record_store = RecordStore(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
    await record_store.initialize()
    yield record_store
    await record_store.close()


@pytest.fixture
def sample_html() -> str:
    """Markup of the sample article page."""
    return SAMPLE_HTML


@pytest.fixture
def document() -> PageDocument:
    """Live sample article document."""
    return PageDocument(SAMPLE_HTML, PAGE_URL)


@pytest.fixture
def make_record():
    """
    Factory for in-memory AnnotationRecord instances.

    Returns:
        Callable: make_record(text, record_id=..., **overrides)
    """
    counter = {"n": 0}

    def _make(text: str, record_id: str | None = None, **overrides) -> AnnotationRecord:
        counter["n"] += 1
        now = datetime.now(timezone.utc)
        values = {
            "id": record_id or f"ann_test{counter['n']}",
            "url": PAGE_URL,
            "domain": "example.com",
            "original_text": text,
            "text_hash": hash_text(text),
            "kind": AnnotationKind.HIGHLIGHT,
            "timestamp": now,
            "last_modified": now,
            "context": AnnotationContext(),
            "status": AnnotationStatus.ACTIVE,
        }
        values.update(overrides)
        return AnnotationRecord(**values)

    return _make


@pytest.fixture
def create_payload():
    """
    Factory for camelCase create payloads as they arrive over the transport.

    Returns:
        Callable: create_payload(text="...", **overrides)
    """

    def _payload(text: str = "quick brown fox", **overrides) -> dict:
        payload = {
            "url": PAGE_URL,
            "originalText": text,
            "selector": "p#intro.lead",
            "color": "#ffeb3b",
            "context": {"before": "The", "after": "jumps over"},
            "position": {"x": 10, "y": 20, "width": 100, "height": 18},
            "metadata": {"pageTitle": "Sample Article", "pageUrl": PAGE_URL},
        }
        payload.update(overrides)
        return payload

    return _payload
