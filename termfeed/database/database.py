"""
Database facade - provides unified access to all repositories.

A Database is constructed explicitly by the caller and passed to the
services that need it; nothing holds a process-wide handle.
"""

from pathlib import Path

from .connection import DatabaseConnection
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .tag_repository import TagRepository
from .models import DBArticle, DBFeed, DBTag


class Database:
    """
    Unified database access facade.

    Repositories are available as attributes; the most common operations
    are also delegated directly.
    """

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        # Initialize repositories
        self.feeds = FeedRepository(self._connection)
        self.articles = ArticleRepository(self._connection)
        self.tags = TagRepository(self._connection)

    @property
    def path(self) -> Path:
        return self._connection.db_path

    def migrate(self) -> list[int]:
        return self._connection.migrate()

    # ─────────────────────────────────────────────────────────────
    # Feed operations (delegated to FeedRepository)
    # ─────────────────────────────────────────────────────────────

    def add_feed(
        self,
        url: str,
        title: str = "",
        description: str = "",
        site_url: str = "",
        category: str = ""
    ) -> DBFeed:
        return self.feeds.upsert(url, title, description, site_url, category)

    def get_feed(self, feed_id: int) -> DBFeed | None:
        return self.feeds.get(feed_id)

    def get_feed_by_url(self, url: str) -> DBFeed | None:
        return self.feeds.get_by_url(url)

    def get_feeds(self) -> list[DBFeed]:
        return self.feeds.get_all()

    def touch_feed_fetched(self, feed_id: int):
        return self.feeds.touch_fetched(feed_id)

    def delete_feed(self, feed_id: int) -> bool:
        return self.feeds.delete(feed_id)

    # ─────────────────────────────────────────────────────────────
    # Article operations (delegated to ArticleRepository)
    # ─────────────────────────────────────────────────────────────

    def upsert_article(
        self,
        feed_id: int,
        guid: str,
        title: str = "",
        link: str = "",
        content: str = "",
        summary: str = "",
        author: str = "",
        published_at: int | None = None,
    ) -> DBArticle:
        return self.articles.upsert(
            feed_id, guid, title, link, content, summary, author, published_at
        )

    def get_article(self, article_id: int) -> DBArticle | None:
        return self.articles.get(article_id)

    def get_articles(
        self,
        feed_id: int | None = None,
        starred_only: bool = False,
        limit: int = 200
    ) -> list[DBArticle]:
        if starred_only:
            articles = self.articles.get_starred()
            if feed_id is not None:
                articles = [a for a in articles if a.feed_id == feed_id]
            return articles[:limit]
        if feed_id is not None:
            return self.articles.get_by_feed(feed_id, limit)
        return self.articles.get_all(limit)

    def mark_read(self, article_id: int, is_read: bool = True):
        return self.articles.mark_read(article_id, is_read)

    def mark_feed_read(self, feed_id: int) -> int:
        return self.articles.mark_feed_read(feed_id)

    def toggle_starred(self, article_id: int) -> bool:
        return self.articles.toggle_starred(article_id)

    # ─────────────────────────────────────────────────────────────
    # Tag operations (delegated to TagRepository)
    # ─────────────────────────────────────────────────────────────

    def get_or_create_tag(self, name: str) -> DBTag:
        return self.tags.get_or_create(name)

    def tag_article(self, article_id: int, name: str) -> DBTag:
        """Attach a tag (created on first use) to an article."""
        tag = self.tags.get_or_create(name)
        self.tags.add_to_article(article_id, tag.id)
        return tag

    def get_article_tags(self, article_id: int) -> list[DBTag]:
        return self.tags.get_for_article(article_id)
