"""
Feed service: business logic for feed management operations.

Handles feed subscription and OPML import/export.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..database import Database
from ..database.models import DBFeed
from ..exceptions import FetchError, OPMLImportError, require_feed
from ..opml import parse_opml, generate_opml, OPMLFeed
from .sync_service import RefreshResult, SyncService

if TYPE_CHECKING:
    from ..feed_parser import FeedParser

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Counts from an OPML import."""
    added: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


class FeedService:
    """Service for feed-related business logic."""

    def __init__(self, db: Database, feed_parser: "FeedParser"):
        self.db = db
        self.feed_parser = feed_parser
        self.sync = SyncService(db, feed_parser)

    def list_feeds(self) -> list[DBFeed]:
        """List all subscribed feeds with unread counts."""
        return self.db.get_feeds()

    # ─────────────────────────────────────────────────────────────
    # Subscription
    # ─────────────────────────────────────────────────────────────

    async def subscribe(
        self,
        url: str,
        category: str = "",
        discover: bool = True,
    ) -> DBFeed:
        """
        Subscribe to a feed and store its current items.

        If ``url`` is an HTML page advertising a feed, the advertised feed is
        subscribed instead.

        Raises:
            FetchError: If no feed could be fetched from the URL
        """
        try:
            parsed = await self.sync.fetch_and_normalize(url)
        except FetchError:
            discovered = await self.feed_parser.discover_feed(url) if discover else None
            if not discovered or discovered == url:
                raise
            logger.info(f"Discovered feed {discovered} from {url}")
            url = discovered
            parsed = await self.sync.fetch_and_normalize(url)

        feed = self.db.add_feed(
            url=url,
            title=parsed.title,
            description=parsed.description,
            site_url=parsed.site_url,
            category=category,
        )

        result = RefreshResult(feed_id=feed.id)
        self.sync.store_items(feed.id, parsed, result)
        self.db.touch_feed_fetched(feed.id)
        if result.errors:
            logger.warning(
                f"Subscribed to {url} but {len(result.errors)} articles could not be stored"
            )
        logger.info(
            f"Subscribed to {url}: {result.added} articles, {len(result.errors)} errors"
        )

        return require_feed(self.db.get_feed(feed.id), feed.id)

    def unsubscribe(self, feed_id: int) -> None:
        """
        Remove a feed with its articles and their tags.

        Raises:
            UnknownFeedError: If feed not found
        """
        require_feed(self.db.get_feed(feed_id), feed_id)
        self.db.delete_feed(feed_id)

    # ─────────────────────────────────────────────────────────────
    # OPML Import/Export
    # ─────────────────────────────────────────────────────────────

    def import_opml(self, opml_content: str | bytes) -> ImportResult:
        """
        Import feeds from OPML content without fetching them.

        Already-subscribed URLs are skipped; a failing entry is recorded in
        ``errors`` and the rest are still imported.

        Raises:
            OPMLImportError: If the content is not OPML
        """
        try:
            opml_doc = parse_opml(opml_content)
        except ValueError as e:
            raise OPMLImportError(f"Invalid OPML: {e}") from e

        result = ImportResult()
        for opml_feed in opml_doc.feeds:
            try:
                if self.db.get_feed_by_url(opml_feed.url):
                    result.skipped += 1
                    continue
                self.db.add_feed(
                    url=opml_feed.url,
                    title=opml_feed.title,
                    category=opml_feed.category,
                )
                result.added += 1
            except Exception as e:
                logger.warning(f"Error importing feed {opml_feed.url}: {e}")
                result.errors.append(f'Error importing feed "{opml_feed.url}": {e}')

        logger.info(f"OPML import: {result.added} added, {result.skipped} skipped")
        return result

    def import_opml_file(self, path: Path | str) -> ImportResult:
        """
        Import feeds from an OPML file.

        Raises:
            OPMLImportError: If the file cannot be read or is not OPML
        """
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise OPMLImportError(f'Failed to read OPML file "{path}": {e}') from e

        return self.import_opml(content)

    def export_opml(self, title: str = "termfeed subscriptions") -> str:
        """Export all feeds as an OPML document."""
        opml_feeds = [
            OPMLFeed(url=f.url, title=f.title, category=f.category)
            for f in self.db.get_feeds()
        ]
        return generate_opml(opml_feeds, title=title)
