"""Shell session identity used to de-duplicate prompt notes."""

import os
import socket

ENV_SESSION = "DIRNOTES_SESSION"


def derive_session_id() -> str:
    """Identify the calling shell session.

    The parent process of a prompt hook is the shell itself, so host name plus
    parent pid distinguishes terminals. ``$DIRNOTES_SESSION`` overrides it.
    """
    override = os.getenv(ENV_SESSION)
    if override:
        return override
    return f"{socket.gethostname()}:{os.getppid()}"
