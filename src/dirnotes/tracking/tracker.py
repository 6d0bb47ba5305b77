"""Keep the tracked-directory table in step with notes files on disk."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from dirnotes.config import NOTES_FILENAME
from dirnotes.notes import notes_path, read_summary
from dirnotes.tracking.store import NotesStore

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of a refresh pass, by directory path."""

    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class DirectoryTracker:
    """Records visits and prunes directories whose notes have gone away.

    A directory that cannot be found is never taken as proof that its notes
    were deleted: removable media may simply be unmounted. Only `delete`
    removes records for directories that are not present.
    """

    def __init__(self, store: NotesStore, notes_filename: str = NOTES_FILENAME):
        self.store = store
        self.notes_filename = notes_filename

    def notes_path(self, directory: Path) -> Path:
        return notes_path(directory, self.notes_filename)

    def inspect(self, directory: Path) -> tuple[bool, bool] | None:
        """Return (directory present, notes file present).

        None means the directory could not be checked at all, e.g. a parent is
        unreadable; callers skip it.
        """
        try:
            return directory.is_dir(), self.notes_path(directory).is_file()
        except OSError as e:
            logger.warning("Cannot inspect %s: %s", directory, e)
            return None

    def track_visit(self, dir_path: Path, summary: str | None) -> None:
        """Record that a directory's notes were just shown.

        New directories start with last_activity = now; known directories only
        get their summary updated.
        """
        self.store.upsert(str(dir_path), summary, reset_activity=False)
        logger.debug("Tracked visit to %s", dir_path)

    def refresh(self, dir_paths: Iterable[Path] = ()) -> RefreshResult:
        """Re-derive summaries, dropping directories whose notes file is gone.

        With no directories given, every tracked directory is refreshed.
        """
        dirs = list(dir_paths)
        if not dirs:
            dirs = [Path(entry.path) for entry in self.store.list_recent()]

        result = RefreshResult()
        for directory in dirs:
            key = str(directory)
            state = self.inspect(directory)
            if state is None or not state[0]:
                logger.debug("Skipping %s: directory not accessible", directory)
                result.skipped.append(key)
                continue

            notes = self.notes_path(directory)
            if not state[1]:
                self.store.remove(key)
                result.removed.append(key)
                continue

            try:
                summary = read_summary(notes)
            except OSError as e:
                logger.warning("Could not read %s: %s", notes, e)
                result.skipped.append(key)
                continue

            self.store.upsert(key, summary, reset_activity=False)
            result.updated.append(key)

        return result

    def clean_up(self, dir_paths: Iterable[Path]) -> list[str]:
        """Forget existing directories that no longer have a notes file."""
        removed = []
        for directory in dir_paths:
            if self.inspect(directory) == (True, False):
                if self.store.remove(str(directory)):
                    logger.debug("Removed %s: notes file gone", directory)
                    removed.append(str(directory))
        return removed

    def delete(self, dir_paths: Iterable[Path]) -> dict[str, bool]:
        """Forget directories and delete their notes files where possible.

        Returns {path: notes_file_deleted}.
        """
        results: dict[str, bool] = {}
        for directory in dir_paths:
            self.store.remove(str(directory))
            deleted = False
            notes = self.notes_path(directory)
            try:
                if notes.is_file():
                    notes.unlink()
                    deleted = True
            except OSError as e:
                logger.warning("Could not delete %s: %s", notes, e)
            results[str(directory)] = deleted
        return results
