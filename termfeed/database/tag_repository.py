"""
Tag repository - tags and article/tag associations.
"""

from .connection import DatabaseConnection
from .converters import row_to_tag
from .models import DBTag


class TagRepository:
    """Repository for tag operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get_or_create(self, name: str) -> DBTag:
        """Return the tag with this name, creating it on first use."""
        with self._db.conn() as conn:
            conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (name,))
            row = conn.execute("SELECT * FROM tags WHERE name = ?", (name,)).fetchone()
            return row_to_tag(row)

    def get_all(self) -> list[DBTag]:
        with self._db.conn() as conn:
            rows = conn.execute("SELECT * FROM tags ORDER BY name COLLATE NOCASE").fetchall()
            return [row_to_tag(row) for row in rows]

    def add_to_article(self, article_id: int, tag_id: int):
        """Associate a tag with an article. Adding an existing association is a no-op."""
        with self._db.conn() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO article_tags (article_id, tag_id) VALUES (?, ?)",
                (article_id, tag_id)
            )

    def remove_from_article(self, article_id: int, tag_id: int):
        with self._db.conn() as conn:
            conn.execute(
                "DELETE FROM article_tags WHERE article_id = ? AND tag_id = ?",
                (article_id, tag_id)
            )

    def get_for_article(self, article_id: int) -> list[DBTag]:
        """Get the tags attached to an article, by name."""
        with self._db.conn() as conn:
            rows = conn.execute(
                """SELECT t.* FROM tags t
                   JOIN article_tags at ON at.tag_id = t.id
                   WHERE at.article_id = ?
                   ORDER BY t.name COLLATE NOCASE""",
                (article_id,)
            ).fetchall()
            return [row_to_tag(row) for row in rows]

    def count_associations(self, feed_id: int | None = None) -> int:
        """Count article/tag links, optionally restricted to one feed's articles."""
        with self._db.conn() as conn:
            if feed_id is not None:
                row = conn.execute(
                    """SELECT COUNT(*) AS count FROM article_tags at
                       JOIN articles a ON a.id = at.article_id
                       WHERE a.feed_id = ?""",
                    (feed_id,)
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) AS count FROM article_tags").fetchone()
            return row["count"]
