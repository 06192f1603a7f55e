"""
termfeed

A terminal feed reader. Fetches RSS/Atom feeds into a local SQLite
database, tracks read/starred state and provides full-text search.
"""

__version__ = "0.3.0"
