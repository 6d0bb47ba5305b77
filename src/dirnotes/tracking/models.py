"""Data models for tracked directories and session display records."""

from pydantic import BaseModel, Field


class TrackedDirectory(BaseModel):
    """A directory known to have a notes file."""

    path: str = Field(description="Absolute, normalized directory path")
    summary: str | None = Field(default=None, description="First non-blank line of the notes")
    last_activity: float = Field(description="Epoch seconds of the last recorded visit")


class SessionDisplayRecord(BaseModel):
    """Marks a notes version as already shown within a shell session."""

    session_id: str
    dir_path: str
    notes_version: int = Field(description="Notes file mtime in nanoseconds")
    display_timestamp: float


class RecentActivity(BaseModel):
    """One row of the recent activity view."""

    date: str = Field(description="Local time of last activity, YYYY-MM-DD HH:MM")
    path: str
    summary: str | None = None
    last_activity: float
