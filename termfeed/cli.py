"""
Command-line interface.

    termfeed add <url> [--category NAME]
    termfeed import <file.opml>
    termfeed export [-o FILE]
    termfeed refresh [FEED_ID ...]
    termfeed list
    termfeed articles [--feed ID] [--starred] [--limit N]
    termfeed search <query...> [--limit N]
    termfeed read <article_id> [--unread]
    termfeed star <article_id>
    termfeed mark-read <feed_id>
    termfeed remove <feed_id>
    termfeed tag <article_id> <name>
"""

import argparse
import asyncio
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import config
from .database import Database
from .exceptions import TermfeedError, require_article, require_feed
from .feed_parser import FeedParser
from .services import FeedService, SearchService, SyncService

logger = logging.getLogger(__name__)


def _format_time(timestamp: int | None) -> str:
    if timestamp is None:
        return ""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def _flags(is_read: bool, is_starred: bool) -> str:
    return ("*" if is_starred else " ") + (" " if is_read else "N")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="termfeed", description="Terminal feed reader")
    parser.add_argument("--db", type=Path, help=f"database path (default: {config.DB_PATH})")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="subscribe to a feed")
    add.add_argument("url")
    add.add_argument("--category", default="")

    imp = sub.add_parser("import", help="import subscriptions from OPML")
    imp.add_argument("path", type=Path)

    exp = sub.add_parser("export", help="export subscriptions as OPML")
    exp.add_argument("-o", "--output", type=Path)

    refresh = sub.add_parser("refresh", help="fetch new articles")
    refresh.add_argument("feed_ids", nargs="*", type=int, metavar="FEED_ID")

    sub.add_parser("list", help="list feeds with unread counts")

    articles = sub.add_parser("articles", help="list articles")
    articles.add_argument("--feed", type=int, dest="feed_id")
    articles.add_argument("--starred", action="store_true")
    articles.add_argument("--limit", type=int, default=50)

    search = sub.add_parser("search", help="full-text search")
    search.add_argument("query", nargs="+")
    search.add_argument("--limit", type=int, default=config.SEARCH_LIMIT)

    read = sub.add_parser("read", help="show an article and mark it read")
    read.add_argument("article_id", type=int)
    read.add_argument("--unread", action="store_true", help="mark unread instead")

    star = sub.add_parser("star", help="toggle an article's star")
    star.add_argument("article_id", type=int)

    mark_read = sub.add_parser("mark-read", help="mark every article in a feed read")
    mark_read.add_argument("feed_id", type=int)

    remove = sub.add_parser("remove", help="unsubscribe from a feed")
    remove.add_argument("feed_id", type=int)

    tag = sub.add_parser("tag", help="tag an article")
    tag.add_argument("article_id", type=int)
    tag.add_argument("name")

    return parser


# ─────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────

def cmd_add(args, db: Database, out: Console) -> int:
    service = FeedService(db, FeedParser())
    feed = asyncio.run(service.subscribe(args.url, category=args.category))
    out.print(f"Added: {feed.display_title}", markup=False)
    return 0


def cmd_import(args, db: Database, out: Console) -> int:
    service = FeedService(db, FeedParser())
    result = service.import_opml_file(args.path)
    out.print(f"Imported: {result.added} added, {result.skipped} skipped")
    for error in result.errors:
        out.print(f"  Warning: {error}", markup=False)
    return 0


def cmd_export(args, db: Database, out: Console) -> int:
    opml = FeedService(db, FeedParser()).export_opml()
    if args.output:
        args.output.write_text(opml, encoding="utf-8")
        out.print(f"Exported {len(db.get_feeds())} feeds to {args.output}")
    else:
        out.print(opml, end="", markup=False, highlight=False, soft_wrap=True)
    return 0


def cmd_refresh(args, db: Database, out: Console) -> int:
    sync = SyncService(db, FeedParser())
    if args.feed_ids:
        results = asyncio.run(sync.refresh_feeds(args.feed_ids))
    else:
        results = asyncio.run(sync.refresh_all())

    total = sum(r.added for r in results)
    out.print(f"Refreshed {len(results)} feeds, {total} new articles")
    for result in results:
        for error in result.errors:
            out.print(f"  Feed {result.feed_id}: {error}", markup=False)
    return 0


def cmd_list(args, db: Database, out: Console) -> int:
    feeds = db.get_feeds()
    if not feeds:
        out.print("No feeds. Use: termfeed add <url>")
        return 0

    table = Table(box=None)
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Unread", justify="right")
    table.add_column("Fetched")
    for feed in feeds:
        table.add_row(
            str(feed.id),
            escape(feed.display_title),
            escape(feed.category),
            str(feed.unread_count) if feed.unread_count else "",
            _format_time(feed.last_fetched_at),
        )
    out.print(table)
    return 0


def cmd_articles(args, db: Database, out: Console) -> int:
    if args.feed_id is not None:
        require_feed(db.get_feed(args.feed_id), args.feed_id)
    articles = db.get_articles(feed_id=args.feed_id, starred_only=args.starred, limit=args.limit)
    if not articles:
        out.print("No articles.")
        return 0

    table = Table(box=None)
    table.add_column("ID", justify="right")
    table.add_column("")
    table.add_column("Published")
    table.add_column("Title")
    for article in articles:
        table.add_row(
            str(article.id),
            _flags(article.is_read, article.is_starred),
            _format_time(article.published_at),
            escape(article.title),
        )
    out.print(table)
    return 0


def cmd_search(args, db: Database, out: Console) -> int:
    results = SearchService(db).search_articles(" ".join(args.query), limit=args.limit)
    if not results:
        out.print("No matches.")
        return 0

    table = Table(box=None)
    table.add_column("ID", justify="right")
    table.add_column("")
    table.add_column("Feed")
    table.add_column("Title")
    for result in results:
        table.add_row(
            str(result.id),
            _flags(result.is_read, result.is_starred),
            escape(result.feed_title),
            escape(result.title),
        )
    out.print(table)
    return 0


def cmd_read(args, db: Database, out: Console) -> int:
    article = require_article(db.get_article(args.article_id), args.article_id)
    if args.unread:
        db.mark_read(article.id, False)
        out.print(f"Marked article {article.id} unread")
        return 0

    db.mark_read(article.id, True)
    out.rule(escape(article.title or "(untitled)"))
    meta = " | ".join(p for p in (article.author, _format_time(article.published_at), article.link) if p)
    if meta:
        out.print(meta, markup=False, style="dim")
    tags = ", ".join(t.name for t in db.get_article_tags(article.id))
    if tags:
        out.print(f"Tags: {tags}", markup=False)
    out.print()
    out.print(article.summary or article.content, markup=False)
    return 0


def cmd_star(args, db: Database, out: Console) -> int:
    require_article(db.get_article(args.article_id), args.article_id)
    starred = db.toggle_starred(args.article_id)
    out.print(f"{'Starred' if starred else 'Unstarred'} article {args.article_id}")
    return 0


def cmd_mark_read(args, db: Database, out: Console) -> int:
    require_feed(db.get_feed(args.feed_id), args.feed_id)
    db.mark_feed_read(args.feed_id)
    out.print(f"Marked all articles in feed {args.feed_id} as read")
    return 0


def cmd_remove(args, db: Database, out: Console) -> int:
    feed = require_feed(db.get_feed(args.feed_id), args.feed_id)
    FeedService(db, FeedParser()).unsubscribe(feed.id)
    out.print(f"Removed: {feed.display_title}", markup=False)
    return 0


def cmd_tag(args, db: Database, out: Console) -> int:
    require_article(db.get_article(args.article_id), args.article_id)
    tag = db.tag_article(args.article_id, args.name)
    out.print(f"Tagged article {args.article_id} with {tag.name!r}", markup=False)
    return 0


COMMANDS = {
    "add": cmd_add,
    "import": cmd_import,
    "export": cmd_export,
    "refresh": cmd_refresh,
    "list": cmd_list,
    "articles": cmd_articles,
    "search": cmd_search,
    "read": cmd_read,
    "star": cmd_star,
    "mark-read": cmd_mark_read,
    "remove": cmd_remove,
    "tag": cmd_tag,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    out = Console(highlight=False)
    err = Console(stderr=True, highlight=False)

    try:
        db = Database(args.db or config.DB_PATH)
        logger.debug(f"Using database {db.path}")
        return COMMANDS[args.command](args, db, out)
    except TermfeedError as e:
        err.print(f"Error: {e}", markup=False)
        return 1
    except sqlite3.Error as e:
        logger.debug("Database error", exc_info=True)
        err.print(f"Error: database error: {e}", markup=False)
        return 1
