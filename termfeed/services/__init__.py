"""
Service layer for business logic.

Each service receives its dependencies via constructor injection:

    db = Database(config.DB_PATH)
    sync = SyncService(db, FeedParser())
    results = await sync.refresh_all()
"""

from .feed_service import FeedService, ImportResult
from .search_service import SearchService, sanitize_fts_query
from .sync_service import RefreshResult, SyncService

__all__ = [
    "FeedService",
    "ImportResult",
    "RefreshResult",
    "SearchService",
    "SyncService",
    "sanitize_fts_query",
]
