import asyncio

from styngr.models.session import PlaylistSession
from styngr.models.statistics import FinalizedStatistics, PlaybackStatistics
from styngr.models.track import Playlist


class SessionState:
    """Per-user state shared by the tracker and the session manager.

    One instance per configured service; nothing here outlives the process.
    """

    def __init__(self):
        self.tracking: dict[int, PlaybackStatistics] = {}
        self.sessions: dict[int, PlaylistSession] = {}
        self.playlists: dict[int, dict[str, Playlist]] = {}
        self.listening: dict[int, bool] = {}
        # Finalized statistics the backend has not acknowledged yet
        self.pending: dict[int, FinalizedStatistics] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def lock_for(self, user_id: int) -> asyncio.Lock:
        """Get or create the lock serializing a user's session transitions."""
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    def remove(self, user_id: int) -> None:
        """Forget everything about a user (call when they disconnect)."""
        self.tracking.pop(user_id, None)
        self.sessions.pop(user_id, None)
        self.playlists.pop(user_id, None)
        self.listening.pop(user_id, None)
        self.pending.pop(user_id, None)
        lock = self._locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._locks[user_id]
