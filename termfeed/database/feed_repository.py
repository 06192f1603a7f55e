"""
Feed repository - CRUD operations for feeds.
"""

import time

from .connection import DatabaseConnection
from .converters import row_to_feed
from .models import DBFeed


class FeedRepository:
    """Repository for feed operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def upsert(
        self,
        url: str,
        title: str = "",
        description: str = "",
        site_url: str = "",
        category: str = ""
    ) -> DBFeed:
        """
        Add a feed, or update its metadata if the URL is already subscribed.

        Returns the stored feed.
        """
        with self._db.conn() as conn:
            row = conn.execute(
                """INSERT INTO feeds (url, title, description, site_url, category)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(url) DO UPDATE SET
                     title       = excluded.title,
                     description = excluded.description,
                     site_url    = excluded.site_url,
                     category    = excluded.category
                   RETURNING *""",
                (url, title, description, site_url, category)
            ).fetchone()
            return row_to_feed(row)

    def get(self, feed_id: int) -> DBFeed | None:
        """Get single feed by ID with its unread count."""
        with self._db.conn() as conn:
            row = conn.execute(
                """SELECT f.*,
                          COUNT(CASE WHEN a.is_read = 0 THEN 1 END) AS unread_count
                   FROM feeds f
                   LEFT JOIN articles a ON a.feed_id = f.id
                   WHERE f.id = ?
                   GROUP BY f.id""",
                (feed_id,)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_by_url(self, url: str) -> DBFeed | None:
        """Get feed by URL."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM feeds WHERE url = ?", (url,)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_all(self) -> list[DBFeed]:
        """Get all feeds with unread counts, ordered by title."""
        with self._db.conn() as conn:
            rows = conn.execute("""
                SELECT f.*,
                       COUNT(CASE WHEN a.is_read = 0 THEN 1 END) AS unread_count
                FROM feeds f
                LEFT JOIN articles a ON a.feed_id = f.id
                GROUP BY f.id
                ORDER BY f.title COLLATE NOCASE
            """).fetchall()
            return [row_to_feed(row) for row in rows]

    def update(
        self,
        feed_id: int,
        title: str | None = None,
        category: str | None = None
    ):
        """Update feed title and/or category. An empty category clears it."""
        with self._db.conn() as conn:
            if title is not None:
                conn.execute("UPDATE feeds SET title = ? WHERE id = ?", (title, feed_id))
            if category is not None:
                conn.execute("UPDATE feeds SET category = ? WHERE id = ?", (category, feed_id))

    def touch_fetched(self, feed_id: int, fetched_at: int | None = None):
        """Update feed's last fetched timestamp (defaults to now)."""
        if fetched_at is None:
            fetched_at = int(time.time())
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET last_fetched_at = ? WHERE id = ?",
                (fetched_at, feed_id)
            )

    def delete(self, feed_id: int) -> bool:
        """Delete feed; its articles and their tag links cascade. Returns True if removed."""
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
            return cursor.rowcount > 0
