"""Notes file helpers - locate, read and summarize per-directory notes."""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dirnotes.config import NOTES_FILENAME

logger = logging.getLogger(__name__)


def resolve_dirs(dirs: Iterable[str | Path]) -> list[Path]:
    """Normalize directory arguments into unique absolute paths.

    Expands ``~`` and collapses ``.``/``..`` without following symlinks, so the
    stored path matches what the user typed. An empty input means the current
    directory, or no directories at all when the shell sits in a directory that
    has since been deleted.
    """
    resolved: list[Path] = []
    seen: set[Path] = set()
    for d in dirs:
        try:
            path = Path(os.path.abspath(os.path.expanduser(str(d))))
        except FileNotFoundError:
            logger.warning("Cannot resolve %s: current directory no longer exists", d)
            continue
        if path not in seen:
            seen.add(path)
            resolved.append(path)
    if not resolved:
        try:
            resolved.append(Path(os.path.abspath(os.getcwd())))
        except FileNotFoundError:
            logger.debug("Current directory no longer exists")
    return resolved


def notes_path(directory: Path, filename: str = NOTES_FILENAME) -> Path:
    return directory / filename


def read_notes(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def extract_summary(text: str) -> str | None:
    """Return the first line that is not blank once trimmed."""
    # Newlines only: splitlines() also breaks on \f, \v and \u2028
    for line in text.split("\n"):
        line = line.strip()
        if line:
            return line
    return None


def read_summary(path: Path) -> str | None:
    return extract_summary(read_notes(path))


def notes_version(path: Path) -> int:
    """Modification time of a notes file, used as its content version."""
    return path.stat().st_mtime_ns
