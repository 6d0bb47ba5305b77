"""Configuration defaults and environment overrides for dirnotes."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DB_PATH = Path.home() / ".dir_notes.db"
NOTES_FILENAME = ".notes"

# A session record older than this is forgotten and its note shown again
SESSION_TIMEOUT = 8 * 60 * 60

# Columns available to `dirnotes ls --columns`
COLUMNS = ("date", "dir", "summary")

LOG_LEVEL = "WARNING"

# Environment variable names
ENV_DB = "DIRNOTES_DB"
ENV_NOTES_FILE = "DIRNOTES_FILE"
ENV_SESSION_TIMEOUT = "DIRNOTES_SESSION_TIMEOUT"
ENV_LOG_LEVEL = "DIRNOTES_LOG_LEVEL"


class Settings(BaseModel):
    """Resolved runtime settings for one invocation."""

    db_path: Path = Field(default=DB_PATH, description="SQLite database holding tracked directories")
    notes_filename: str = Field(default=NOTES_FILENAME, description="Name of the per-directory notes file")
    session_timeout: int = Field(default=SESSION_TIMEOUT, ge=0, description="Seconds before a displayed note may be shown again")
    log_level: str = LOG_LEVEL


def load_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults.

    Priority: environment variables > defaults. CLI options are applied on top
    by the caller.
    """
    return Settings(
        db_path=Path(os.getenv(ENV_DB, str(DB_PATH))).expanduser(),
        notes_filename=os.getenv(ENV_NOTES_FILE, NOTES_FILENAME),
        session_timeout=os.getenv(ENV_SESSION_TIMEOUT, SESSION_TIMEOUT),
        log_level=os.getenv(ENV_LOG_LEVEL, LOG_LEVEL),
    )


def ensure_db_dir(db_path: Path) -> None:
    """Ensure the directory holding the database exists."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
