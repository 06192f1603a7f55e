"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3

from .models import DBArticle, DBFeed, DBTag, SearchResult


def row_to_feed(row: sqlite3.Row) -> DBFeed:
    """Convert a database row to a DBFeed."""
    # Handle unread_count - may not be present in all queries
    try:
        unread_count = row["unread_count"] or 0
    except (IndexError, KeyError):
        unread_count = 0

    return DBFeed(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        description=row["description"],
        site_url=row["site_url"],
        category=row["category"],
        created_at=row["created_at"],
        last_fetched_at=row["last_fetched_at"],
        unread_count=unread_count
    )


def row_to_article(row: sqlite3.Row) -> DBArticle:
    """Convert a database row to a DBArticle."""
    return DBArticle(
        id=row["id"],
        feed_id=row["feed_id"],
        guid=row["guid"],
        title=row["title"],
        link=row["link"],
        content=row["content"],
        summary=row["summary"],
        author=row["author"],
        published_at=row["published_at"],
        is_read=bool(row["is_read"]),
        is_starred=bool(row["is_starred"]),
        created_at=row["created_at"],
    )


def row_to_tag(row: sqlite3.Row) -> DBTag:
    return DBTag(id=row["id"], name=row["name"])


def row_to_search_result(row: sqlite3.Row) -> SearchResult:
    """Convert a joined articles/feeds search row to a SearchResult."""
    return SearchResult(
        id=row["id"],
        feed_id=row["feed_id"],
        guid=row["guid"],
        title=row["title"],
        link=row["link"],
        summary=row["summary"],
        author=row["author"],
        published_at=row["published_at"],
        is_read=bool(row["is_read"]),
        is_starred=bool(row["is_starred"]),
        feed_title=row["feed_title"],
    )
