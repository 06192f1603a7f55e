"""
Database models - dataclasses for database entities.

Timestamps are Unix seconds.
"""

from dataclasses import dataclass


@dataclass
class DBFeed:
    id: int
    url: str
    title: str
    description: str
    site_url: str
    category: str
    created_at: int
    last_fetched_at: int | None
    unread_count: int = 0

    @property
    def display_title(self) -> str:
        return self.title or self.url


@dataclass
class DBArticle:
    id: int
    feed_id: int
    guid: str
    title: str
    link: str
    content: str
    summary: str
    author: str
    published_at: int | None
    is_read: bool
    is_starred: bool
    created_at: int


@dataclass
class DBTag:
    id: int
    name: str


@dataclass
class SearchResult:
    """An article matched by full-text search, flattened with its feed title."""
    id: int
    feed_id: int
    guid: str
    title: str
    link: str
    summary: str
    author: str
    published_at: int | None
    is_read: bool
    is_starred: bool
    feed_title: str
