"""
Configuration loaded from the environment.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _default_db_path() -> Path:
    return Path.home() / ".config" / "termfeed" / "termfeed.db"


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("TERMFEED_DB_PATH", "") or _default_db_path()).expanduser()
    LOG_LEVEL: str = os.getenv("TERMFEED_LOG_LEVEL", "WARNING")

    # Network
    FETCH_TIMEOUT: int = int(os.getenv("TERMFEED_FETCH_TIMEOUT", "30"))  # seconds
    USER_AGENT: str = os.getenv(
        "TERMFEED_USER_AGENT", "termfeed/0.3 (+https://github.com/termfeed/termfeed)"
    )

    SEARCH_LIMIT: int = int(os.getenv("TERMFEED_SEARCH_LIMIT", "50"))


config = Config()
