"""
EditGuard: keeps the on-save path from reacting to its own writes.

Each watched path is in one of two states. Writing mutated code moves the
path to APPLYING_OWN_EDIT together with the hash of the content written;
the next save event carrying exactly that content is recognised as our own
and consumed, returning the path to IDLE. Only the watcher layer drives
these transitions; the mutation core knows nothing about them.
"""

import threading
from enum import Enum
from typing import Dict, Tuple

from bugduck.logging_config import logger
from bugduck.mutation.editor import content_hash


class GuardState(Enum):
    IDLE = "idle"
    APPLYING_OWN_EDIT = "applying_own_edit"


class EditGuard:
    def __init__(self):
        self._lock = threading.Lock()
        self._pending: Dict[str, Tuple[GuardState, str]] = {}

    def state(self, path: str) -> GuardState:
        with self._lock:
            return self._pending.get(path, (GuardState.IDLE, ""))[0]

    def begin_own_edit(self, path: str, content: str) -> None:
        """IDLE -> APPLYING_OWN_EDIT, remembering what is about to be written."""
        with self._lock:
            self._pending[path] = (GuardState.APPLYING_OWN_EDIT, content_hash(content))
        logger.debug(f"Guard: applying own edit to {path}")

    def abort(self, path: str) -> None:
        """Back to IDLE when our write did not happen."""
        with self._lock:
            self._pending.pop(path, None)

    def should_react(self, path: str, content: str) -> bool:
        """
        Decide whether a save event is the user's.

        Returns False exactly once for the event produced by our own write
        (and goes back to IDLE). Any other content means the user saved
        again, which also ends the pending state.
        """
        with self._lock:
            state, expected = self._pending.pop(path, (GuardState.IDLE, ""))

        if state is GuardState.APPLYING_OWN_EDIT and expected == content_hash(content):
            logger.debug(f"Guard: ignoring own edit to {path}")
            return False
        return True
