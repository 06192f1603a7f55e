"""
Pytest fixtures for termfeed tests.
"""

import tempfile
from pathlib import Path

import pytest

from termfeed.database import Database

from .factories import FakeFeedParser


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d) / "termfeed.db"


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def feed_parser():
    return FakeFeedParser()


@pytest.fixture
def db_with_data(test_db):
    """Database with one feed, two articles (one read) and a tag."""
    feed = test_db.add_feed(
        url="https://example.com/feed.xml",
        title="Example Feed",
        category="Tech",
    )
    first = test_db.upsert_article(
        feed_id=feed.id,
        guid="a1",
        title="Introduction to SQLite",
        content="SQLite full-text search is powerful",
        published_at=1700000000,
    )
    second = test_db.upsert_article(
        feed_id=feed.id,
        guid="a2",
        title="Async Python",
        content="Event loops and coroutines",
        published_at=1700000100,
    )
    test_db.mark_read(first.id, True)
    test_db.tag_article(first.id, "news")

    yield test_db, {
        "feed_id": feed.id,
        "article_ids": [first.id, second.id],
    }
