"""Operation-in-progress registry.

Serializes mutations per entity: at most one in-flight action per artwork
row, and one invite regeneration per family. Runs on the event loop, so a
plain set is enough.
"""

from contextlib import asynccontextmanager


class ActionInProgress(Exception):
    def __init__(self, key: str):
        super().__init__(f"Action already in progress: {key}")
        self.key = key


class ActionTracker:
    def __init__(self):
        self._busy: set[str] = set()

    def is_busy(self, key: str) -> bool:
        return key in self._busy

    def begin_action(self, key: str) -> None:
        if key in self._busy:
            raise ActionInProgress(key)
        self._busy.add(key)

    def end_action(self, key: str) -> None:
        self._busy.discard(key)

    @asynccontextmanager
    async def running(self, key: str):
        self.begin_action(key)
        try:
            yield
        finally:
            self.end_action(key)


def artwork_key(artwork_id: str) -> str:
    return f"artwork:{artwork_id}"


def invite_key(family_id: str) -> str:
    return f"invite:{family_id}"
