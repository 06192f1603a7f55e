"""
Feed Parser - Fetch and parse RSS/Atom feeds.

Handles:
- RSS 0.9x/2.0, RSS 1.0 and Atom 1.0 formats (via feedparser)
- Normalization into a provider-agnostic NormalizedFeed
- Feed autodiscovery from HTML pages
- Rate limiting per domain
"""

import asyncio
import calendar
import logging
import time
from dataclasses import dataclass, field
from urllib.parse import urlparse, urljoin

import aiohttp
import feedparser
from bs4 import BeautifulSoup

from .config import config
from .exceptions import FetchError

logger = logging.getLogger(__name__)


@dataclass
class NormalizedItem:
    """A single feed entry, independent of the feed format."""
    guid: str
    title: str
    link: str
    content: str
    summary: str
    author: str
    published_at: int | None  # Unix seconds


@dataclass
class NormalizedFeed:
    """A parsed feed document."""
    url: str
    title: str
    description: str
    site_url: str
    items: list[NormalizedItem] = field(default_factory=list)


def to_unix_seconds(parsed_date: time.struct_time | None) -> int | None:
    """Convert a feedparser UTC date tuple to Unix seconds."""
    if not parsed_date:
        return None
    try:
        return calendar.timegm(parsed_date)
    except (TypeError, ValueError, OverflowError):
        return None


def html_to_text(html: str) -> str:
    """Strip markup and collapse whitespace."""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(separator=" ")
    return " ".join(text.split())


def resolve_guid(entry) -> str:
    """Explicit id, then link, then title, then the empty string."""
    return entry.get("id") or entry.get("link") or entry.get("title") or ""


def normalize_entry(entry) -> NormalizedItem:
    """Convert a feedparser entry to a NormalizedItem."""
    # Prefer full content (content:encoded / atom:content) over the description
    content = ""
    if entry.get("content"):
        content = entry.content[0].get("value", "") or ""
    if not content:
        content = entry.get("summary", "") or ""

    published_at = to_unix_seconds(entry.get("published_parsed"))
    if published_at is None:
        published_at = to_unix_seconds(entry.get("updated_parsed"))

    return NormalizedItem(
        guid=resolve_guid(entry),
        title=entry.get("title", "") or "",
        link=entry.get("link", "") or "",
        content=content,
        summary=html_to_text(entry.get("summary", "") or ""),
        author=entry.get("author", "") or "",
        published_at=published_at,
    )


class FeedParser:
    """Fetches and parses RSS/Atom feeds with per-domain rate limiting."""

    def __init__(
        self,
        timeout: int | None = None,
        user_agent: str | None = None,
        min_interval: float = 1.0
    ):
        self.timeout = timeout or config.FETCH_TIMEOUT
        self.user_agent = user_agent or config.USER_AGENT
        self._domain_last_fetch: dict[str, float] = {}
        self._min_interval = min_interval  # Minimum seconds between requests to same domain

    async def fetch(self, url: str) -> NormalizedFeed:
        """
        Fetch and parse a feed URL.

        Raises:
            FetchError: On network errors, HTTP error statuses, timeouts or
                a document that is not a feed
        """
        body = await self._get(url)
        return self._parse(url, body)

    async def _get(self, url: str) -> bytes:
        # Rate limit per domain
        domain = urlparse(url).netloc
        await self._rate_limit(domain)

        headers = {"User-Agent": self.user_agent}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    resp.raise_for_status()
                    return await resp.read()
        except aiohttp.ClientResponseError as e:
            raise FetchError(url, f"HTTP {e.status} {e.message}") from e
        except asyncio.TimeoutError as e:
            raise FetchError(url, f"Timed out after {self.timeout}s") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

    def _parse(self, url: str, content: bytes | str) -> NormalizedFeed:
        """Parse feed content using feedparser."""
        parsed = feedparser.parse(content)

        # feedparser is lenient; only give up when nothing feed-like came out
        if not parsed.entries and (parsed.bozo or not parsed.version):
            reason = parsed.get("bozo_exception") or "not an RSS or Atom document"
            raise FetchError(url, f"Failed to parse feed: {reason}")

        items = [normalize_entry(entry) for entry in parsed.entries]

        feed_meta = parsed.feed
        return NormalizedFeed(
            url=url,
            title=feed_meta.get("title", "") or "",
            description=feed_meta.get("description") or feed_meta.get("subtitle") or "",
            site_url=feed_meta.get("link", "") or "",
            items=items,
        )

    async def _rate_limit(self, domain: str):
        """Ensure minimum interval between requests to same domain.

        The slot is claimed before sleeping so concurrent callers for one
        domain queue up instead of firing together.
        """
        now = time.time()
        slot = now
        if domain in self._domain_last_fetch:
            slot = max(now, self._domain_last_fetch[domain] + self._min_interval)
        self._domain_last_fetch[domain] = slot
        if slot > now:
            await asyncio.sleep(slot - now)

    async def discover_feed(self, url: str) -> str | None:
        """
        Find feed URL from HTML page (autodiscovery).

        Returns the discovered feed URL or None if not found.
        """
        try:
            html = await self._get(url)
        except FetchError as e:
            logger.debug(f"Autodiscovery fetch failed for {url}: {e}")
            return None

        return self._discover_feed_from_html(html, url)

    def _discover_feed_from_html(self, html: bytes | str, base_url: str) -> str | None:
        """Extract feed URL from HTML content."""
        soup = BeautifulSoup(html, "html.parser")

        # Look for RSS/Atom link tags
        for link in soup.find_all("link", rel="alternate"):
            link_type = link.get("type", "")
            if "rss" in link_type or "atom" in link_type or "xml" in link_type:
                href = link.get("href")
                if href:
                    return urljoin(base_url, href)

        return None


def parse_feed_sync(content: bytes | str, url: str = "") -> NormalizedFeed:
    """
    Synchronous feed parsing (for use when content is already fetched).

    Useful for testing or when you already have the feed content.
    """
    parser = FeedParser()
    return parser._parse(url, content)
