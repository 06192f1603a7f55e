"""
Schema migrations.

Each migration is applied at most once, inside a single transaction, and
recorded in the ``migrations`` table. Never edit a migration that has
shipped; append a new one instead.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

MIGRATIONS: list[tuple[int, str]] = [
    (1, """
        CREATE TABLE IF NOT EXISTS feeds (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            url             TEXT    NOT NULL UNIQUE,
            title           TEXT    NOT NULL DEFAULT '',
            description     TEXT    NOT NULL DEFAULT '',
            site_url        TEXT    NOT NULL DEFAULT '',
            category        TEXT    NOT NULL DEFAULT '',
            created_at      INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER)),
            last_fetched_at INTEGER
        );

        CREATE TABLE IF NOT EXISTS articles (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            feed_id      INTEGER NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
            guid         TEXT    NOT NULL,
            title        TEXT    NOT NULL DEFAULT '',
            link         TEXT    NOT NULL DEFAULT '',
            content      TEXT    NOT NULL DEFAULT '',
            summary      TEXT    NOT NULL DEFAULT '',
            author       TEXT    NOT NULL DEFAULT '',
            published_at INTEGER,
            is_read      INTEGER NOT NULL DEFAULT 0,
            is_starred   INTEGER NOT NULL DEFAULT 0,
            created_at   INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER)),
            UNIQUE(feed_id, guid)
        );

        CREATE TABLE IF NOT EXISTS tags (
            id   INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS article_tags (
            article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
            tag_id     INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
            PRIMARY KEY (article_id, tag_id)
        );

        CREATE VIRTUAL TABLE IF NOT EXISTS articles_fts USING fts5(
            title,
            content,
            content='articles',
            content_rowid='id'
        );

        CREATE TRIGGER IF NOT EXISTS articles_fts_insert AFTER INSERT ON articles BEGIN
            INSERT INTO articles_fts(rowid, title, content)
            VALUES (new.id, new.title, new.content);
        END;

        CREATE TRIGGER IF NOT EXISTS articles_fts_update AFTER UPDATE ON articles BEGIN
            INSERT INTO articles_fts(articles_fts, rowid, title, content)
            VALUES ('delete', old.id, old.title, old.content);
            INSERT INTO articles_fts(rowid, title, content)
            VALUES (new.id, new.title, new.content);
        END;

        CREATE TRIGGER IF NOT EXISTS articles_fts_delete BEFORE DELETE ON articles BEGIN
            INSERT INTO articles_fts(articles_fts, rowid, title, content)
            VALUES ('delete', old.id, old.title, old.content);
        END;
    """),
    (2, """
        CREATE INDEX IF NOT EXISTS idx_articles_feed ON articles(feed_id);
        CREATE INDEX IF NOT EXISTS idx_articles_starred ON articles(is_starred);
        CREATE INDEX IF NOT EXISTS idx_articles_recency
            ON articles(COALESCE(published_at, created_at) DESC);
    """),
]


def applied_versions(conn: sqlite3.Connection) -> set[int]:
    """Return the set of migration versions recorded as applied."""
    rows = conn.execute("SELECT version FROM migrations").fetchall()
    return {row[0] for row in rows}


def run_migrations(
    conn: sqlite3.Connection,
    migrations: list[tuple[int, str]] | None = None
) -> list[int]:
    """
    Apply pending migrations. Returns the versions applied by this call.

    Each migration and its ``migrations`` row are written in one transaction,
    so a failing migration is rolled back and never recorded.
    """
    migrations = MIGRATIONS if migrations is None else migrations

    conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
    conn.commit()

    applied = applied_versions(conn)
    newly_applied = []

    for version, sql in migrations:
        if version in applied:
            continue
        try:
            conn.executescript(
                f"BEGIN;\n{sql}\nINSERT INTO migrations (version) VALUES ({int(version)});\nCOMMIT;"
            )
        except sqlite3.Error:
            if conn.in_transaction:
                conn.rollback()
            logger.error(f"Migration {version} failed, rolled back")
            raise
        logger.debug(f"Applied migration {version}")
        newly_applied.append(version)

    return newly_applied
