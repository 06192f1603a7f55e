"""
Sync service: merges remote feed documents into the local database.

A refresh never raises for a per-feed or per-item problem. Failures are
collected into the RefreshResult so that one bad source cannot abort a
bulk refresh.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..database import Database
from ..exceptions import FetchError, ItemUpsertError, UnknownFeedError

if TYPE_CHECKING:
    from ..feed_parser import FeedParser, NormalizedFeed

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of refreshing one feed."""
    feed_id: int
    added: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class SyncService:
    """Refreshes feeds through a FeedParser into a Database."""

    def __init__(self, db: Database, feed_parser: "FeedParser"):
        self.db = db
        self.feed_parser = feed_parser

    async def fetch_and_normalize(self, url: str) -> "NormalizedFeed":
        """
        Fetch a feed and normalize its items.

        Raises:
            FetchError: If the download or parse fails
        """
        return await self.feed_parser.fetch(url)

    def store_items(self, feed_id: int, feed: "NormalizedFeed", result: RefreshResult):
        """Upsert every item of a parsed feed, recording per-item failures."""
        for item in feed.items:
            try:
                self.db.upsert_article(
                    feed_id=feed_id,
                    guid=item.guid,
                    title=item.title,
                    link=item.link,
                    content=item.content,
                    summary=item.summary,
                    author=item.author,
                    published_at=item.published_at,
                )
                result.added += 1
            except ItemUpsertError as e:
                logger.warning(f"Feed {feed_id}: {e}")
                result.errors.append(str(e))

    async def refresh_feed(self, feed_id: int) -> RefreshResult:
        """
        Refresh a single feed.

        An unknown feed or a failed fetch is reported in the result; the
        feed's last-fetched time is only updated once its items were
        processed.
        """
        result = RefreshResult(feed_id=feed_id)

        feed = self.db.get_feed(feed_id)
        if feed is None:
            result.errors.append(str(UnknownFeedError(feed_id)))
            return result

        try:
            parsed = await self.fetch_and_normalize(feed.url)
        except FetchError as e:
            logger.warning(f"Error refreshing feed {feed_id} ({feed.url}): {e}")
            result.errors.append(str(e))
            return result

        self.store_items(feed_id, parsed, result)
        self.db.touch_feed_fetched(feed_id)

        logger.info(
            f"Refreshed feed {feed_id}: {result.added} articles, {len(result.errors)} errors"
        )
        return result

    async def refresh_feeds(self, feed_ids: list[int]) -> list[RefreshResult]:
        """
        Refresh several feeds concurrently.

        Returns one result per requested id, in the same order.
        """
        outcomes = await asyncio.gather(
            *(self.refresh_feed(feed_id) for feed_id in feed_ids),
            return_exceptions=True
        )

        results: list[RefreshResult] = []
        for feed_id, outcome in zip(feed_ids, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"Unexpected error refreshing feed {feed_id}", exc_info=outcome)
                outcome = RefreshResult(
                    feed_id=feed_id,
                    errors=[str(outcome) or type(outcome).__name__]
                )
            results.append(outcome)
        return results

    async def refresh_all(self) -> list[RefreshResult]:
        """Refresh every subscribed feed concurrently."""
        feeds = self.db.get_feeds()
        results = await self.refresh_feeds([feed.id for feed in feeds])

        added = sum(r.added for r in results)
        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Refreshed {len(results)} feeds: {added} articles, {failed} with errors")
        return results
