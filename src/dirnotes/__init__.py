"""dirnotes - per-directory notes with recent-activity tracking."""

__version__ = "1.0.0"
