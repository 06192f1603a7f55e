"""
Database module - SQLite operations for feeds, articles and tags.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBArticle, DBFeed, DBTag, SearchResult
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .tag_repository import TagRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBArticle",
    "DBFeed",
    "DBTag",
    "SearchResult",
    "ArticleRepository",
    "FeedRepository",
    "TagRepository",
]
