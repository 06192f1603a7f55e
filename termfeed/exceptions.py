"""
Exception types shared by the sync, search and import layers.

Per-feed and per-item errors are caught by the bulk operations and reported
in their results; the rest propagate to the caller.
"""

from typing import TypeVar

T = TypeVar("T")


class TermfeedError(Exception):
    """Base class for all termfeed errors."""


class FetchError(TermfeedError):
    """A feed could not be downloaded or parsed."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(message)


class ItemUpsertError(TermfeedError):
    """A single article failed to persist."""

    def __init__(self, guid: str, message: str):
        self.guid = guid
        self.message = message
        super().__init__(f"Failed to store article {guid!r}: {message}")


class UnknownFeedError(TermfeedError):
    """A feed id does not exist."""

    def __init__(self, feed_id: int):
        self.feed_id = feed_id
        super().__init__(f"Feed {feed_id} not found")


class UnknownArticleError(TermfeedError):
    """An article id does not exist."""

    def __init__(self, article_id: int):
        self.article_id = article_id
        super().__init__(f"Article {article_id} not found")


class OPMLImportError(TermfeedError):
    """An OPML file could not be read or is not an OPML document."""


def require_feed(feed: T | None, feed_id: int) -> T:
    """
    Raise UnknownFeedError if feed is None, otherwise return the feed.

    Usage:
        feed = require_feed(db.get_feed(feed_id), feed_id)
    """
    if feed is None:
        raise UnknownFeedError(feed_id)
    return feed


def require_article(article: T | None, article_id: int) -> T:
    """Raise UnknownArticleError if article is None."""
    if article is None:
        raise UnknownArticleError(article_id)
    return article
