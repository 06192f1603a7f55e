"""
Article repository - CRUD operations for articles.
"""

import sqlite3

from ..exceptions import ItemUpsertError
from .connection import DatabaseConnection
from .converters import row_to_article, row_to_search_result
from .models import DBArticle, SearchResult

# Newest first; articles without a publish date sort by when we stored them.
_RECENCY_ORDER = "ORDER BY COALESCE(published_at, created_at) DESC, id DESC"


class ArticleRepository:
    """Repository for article operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def upsert(
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
        """
        Insert an article, or refresh the stored copy keyed on (feed_id, guid).

        Only the content fields are overwritten on conflict; read and starred
        flags survive re-ingestion.

        Raises:
            ItemUpsertError: If the row cannot be written
        """
        with self._db.conn() as conn:
            try:
                row = conn.execute(
                    """INSERT INTO articles
                       (feed_id, guid, title, link, content, summary, author, published_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT(feed_id, guid) DO UPDATE SET
                         title        = excluded.title,
                         link         = excluded.link,
                         content      = excluded.content,
                         summary      = excluded.summary,
                         author       = excluded.author,
                         published_at = excluded.published_at
                       RETURNING *""",
                    (feed_id, guid, title, link, content, summary, author, published_at)
                ).fetchone()
            except sqlite3.Error as e:
                raise ItemUpsertError(guid, str(e)) from e
            return row_to_article(row)

    def get(self, article_id: int) -> DBArticle | None:
        """Get single article by ID."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ?", (article_id,)
            ).fetchone()
            return row_to_article(row) if row else None

    def get_by_feed(self, feed_id: int, limit: int = 100) -> list[DBArticle]:
        """Get a feed's articles, newest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM articles WHERE feed_id = ? {_RECENCY_ORDER} LIMIT ?",
                (feed_id, limit)
            ).fetchall()
            return [row_to_article(row) for row in rows]

    def get_all(self, limit: int = 200) -> list[DBArticle]:
        """Get articles across all feeds, newest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM articles {_RECENCY_ORDER} LIMIT ?",
                (limit,)
            ).fetchall()
            return [row_to_article(row) for row in rows]

    def get_starred(self) -> list[DBArticle]:
        """Get all starred articles, newest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM articles WHERE is_starred = 1 {_RECENCY_ORDER}"
            ).fetchall()
            return [row_to_article(row) for row in rows]

    def get_by_tag(self, tag_id: int) -> list[DBArticle]:
        """Get articles carrying a tag, newest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                """SELECT a.* FROM articles a
                   JOIN article_tags at ON at.article_id = a.id
                   WHERE at.tag_id = ?
                   ORDER BY COALESCE(a.published_at, a.created_at) DESC, a.id DESC""",
                (tag_id,)
            ).fetchall()
            return [row_to_article(row) for row in rows]

    def count(self, feed_id: int | None = None) -> int:
        """Count stored articles, optionally for one feed."""
        with self._db.conn() as conn:
            if feed_id is not None:
                row = conn.execute(
                    "SELECT COUNT(*) AS count FROM articles WHERE feed_id = ?", (feed_id,)
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) AS count FROM articles").fetchone()
            return row["count"]

    def mark_read(self, article_id: int, is_read: bool = True):
        """Mark article as read/unread."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE articles SET is_read = ? WHERE id = ?",
                (1 if is_read else 0, article_id)
            )

    def mark_feed_read(self, feed_id: int) -> int:
        """Mark all articles in a feed as read. Returns count updated."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE articles SET is_read = 1 WHERE feed_id = ? AND is_read = 0",
                (feed_id,)
            )
            return cursor.rowcount

    def toggle_starred(self, article_id: int) -> bool:
        """Toggle starred status. Returns new status."""
        with self._db.conn() as conn:
            row = conn.execute(
                "UPDATE articles SET is_starred = 1 - is_starred WHERE id = ? RETURNING is_starred",
                (article_id,)
            ).fetchone()
            return bool(row["is_starred"]) if row else False

    def get_unread_count(self, feed_id: int | None = None) -> int:
        """Get count of unread articles."""
        with self._db.conn() as conn:
            if feed_id is not None:
                row = conn.execute(
                    "SELECT COUNT(*) AS count FROM articles WHERE feed_id = ? AND is_read = 0",
                    (feed_id,)
                ).fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) AS count FROM articles WHERE is_read = 0"
                ).fetchone()
            return row["count"] if row else 0

    def search(self, fts_query: str, limit: int = 50) -> list[SearchResult]:
        """
        Full-text search across article titles and content.

        ``fts_query`` is passed to FTS5 MATCH verbatim and must already be
        sanitized. Results are ordered by rank, best match first.
        """
        with self._db.conn() as conn:
            rows = conn.execute("""
                SELECT a.id, a.feed_id, a.guid, a.title, a.link, a.summary,
                       a.author, a.published_at, a.is_read, a.is_starred,
                       f.title AS feed_title
                FROM articles_fts fts
                JOIN articles a ON a.id = fts.rowid
                JOIN feeds f ON f.id = a.feed_id
                WHERE articles_fts MATCH ?
                ORDER BY rank
                LIMIT ?
            """, (fts_query, limit)).fetchall()
            return [row_to_search_result(row) for row in rows]
