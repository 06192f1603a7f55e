"""
Search service: free-text article search over the FTS5 index.
"""

import re

from ..config import config
from ..database import Database
from ..database.models import SearchResult

# Characters FTS5 treats as query syntax. They are deleted, not escaped,
# so "-security" and "security" search the same.
_FTS_OPERATORS = re.compile(r'["*^()+\-:]')
_WORD = re.compile(r"[^\W_]")


def sanitize_fts_query(raw: str) -> str:
    """
    Turn user input into a safe FTS5 query.

    Operator characters become spaces and every remaining token is quoted as
    an FTS5 string, so punctuation and keywords like ``NOT`` are plain text.
    Tokens without a word character are dropped. The last token gets a ``*``
    so partially typed words match. Returns an empty string when nothing
    searchable is left.
    """
    tokens = [t for t in _FTS_OPERATORS.sub(" ", raw).split() if _WORD.search(t)]
    if not tokens:
        return ""

    quoted = [f'"{t}"' for t in tokens]
    quoted[-1] = f"{quoted[-1]}*"
    return " ".join(quoted)


class SearchService:
    """Service for full-text article search."""

    def __init__(self, db: Database):
        self.db = db

    def search_articles(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """
        Search article titles and content.

        Args:
            query: Free text as typed by the user
            limit: Maximum number of results (defaults to config.SEARCH_LIMIT)

        Returns:
            Matches ordered by relevance, each with its feed title. Empty
            when the query has no searchable terms.
        """
        trimmed = query.strip()
        if not trimmed:
            return []

        fts_query = sanitize_fts_query(trimmed)
        if not fts_query:
            return []

        if limit is None:
            limit = config.SEARCH_LIMIT
        if limit <= 0:
            return []

        return self.db.articles.search(fts_query, limit)
