"""Decide whether a directory's notes should be shown again in a session.

Each (session, directory) pair moves between two states. It is unseen until a
notes version has been recorded for it, and seen once the recorded version
matches the current one. Editing the notes file produces a new version that
does not match, which makes the pair unseen again. Records older than the
session timeout are evicted before every check, so long-idle sessions see
their notes again.
"""

import logging

from dirnotes.tracking.store import NotesStore

logger = logging.getLogger(__name__)


def should_display(
    store: NotesStore,
    dir_path: str,
    notes_mtime: int,
    session_id: str,
    session_timeout: float,
) -> bool:
    """Return True if this notes version has not yet been shown in this session.

    The version is recorded whether or not the caller goes on to display the
    note, so repeated prompts over unchanged notes stay quiet. Only call this
    for directories that actually have a notes file.
    """
    with store.transaction():
        store.evict_stale(session_timeout)
        seen = store.was_displayed(session_id, dir_path, notes_mtime)
        store.record_display(session_id, dir_path, notes_mtime)

    logger.debug(
        "Notes for %s in session %s: %s", dir_path, session_id, "unchanged" if seen else "new"
    )
    return not seen
