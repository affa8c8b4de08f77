import logging
import time
from typing import Callable

from styngr.errors import AlreadyTrackingError, InvalidStateError, NotTrackingError
from styngr.models.statistics import FinalizedStatistics, PlaybackStatistics, TrackEvent
from styngr.music.state import SessionState

logger = logging.getLogger(__name__)


class PlaybackTracker:
    """Tracks how long each user actually listens to the current track.

    Uses wall-clock time because the backend wants calendar timestamps, so a
    system clock change can produce impossible timings. Those surface as
    InvalidStateError instead of being clamped.
    """

    def __init__(self, state: SessionState, clock: Callable[[], float] = time.time):
        self._state = state
        self._clock = clock

    def is_tracking(self, user_id: int) -> bool:
        return user_id in self._state.tracking

    def start_track(self, user_id: int) -> PlaybackStatistics:
        """Begin tracking a new track for the user."""
        if user_id in self._state.tracking:
            raise AlreadyTrackingError(f"Already tracking for user {user_id}")

        statistics = PlaybackStatistics(started=self._clock())
        self._state.tracking[user_id] = statistics
        return statistics

    def record_event(self, user_id: int, event: TrackEvent) -> PlaybackStatistics:
        """Apply a client playback event to the user's record."""
        try:
            event = TrackEvent(event)
        except ValueError:
            raise InvalidStateError(f"Invalid event: {event!r}") from None

        statistics = self._state.tracking.get(user_id)
        if statistics is None:
            raise NotTrackingError(f"No active tracking for user {user_id}")

        now = self._clock()

        if event is TrackEvent.PLAYED:
            if statistics.ended is not None:
                raise InvalidStateError("Track already ended")
            statistics.started = now

        elif event is TrackEvent.PAUSED:
            if statistics.is_paused:
                raise InvalidStateError("Already paused")
            statistics.paused = now

        elif event is TrackEvent.RESUMED:
            if not statistics.is_paused:
                raise InvalidStateError("Not paused")
            paused_for = now - statistics.paused
            if paused_for < 0:
                raise InvalidStateError(f"Resumed {-paused_for:.0f}s before it was paused")
            statistics.total_paused += paused_for
            statistics.paused = None

        elif event is TrackEvent.ENDED:
            if statistics.started is None:
                raise InvalidStateError("Not started")
            if now < statistics.started:
                raise InvalidStateError("Ended before it started")
            statistics.ended = now

        else:
            raise InvalidStateError(f"Unhandled event: {event}")

        logger.debug("User %s: %s", user_id, event.value)
        return statistics

    def end_track(self, user_id: int) -> FinalizedStatistics:
        """Stop tracking and return the finalized statistics."""
        statistics = self._state.tracking.get(user_id)
        if statistics is None:
            raise NotTrackingError(f"No active tracking for user {user_id}")
        if statistics.started is None:
            raise InvalidStateError("Not started")

        ended = statistics.ended if statistics.ended is not None else self._clock()
        duration = (ended - statistics.started) - statistics.total_paused
        if duration < 0:
            raise InvalidStateError(
                f"Negative listening duration ({duration:.0f}s) for user {user_id}"
            )

        del self._state.tracking[user_id]
        return FinalizedStatistics(started=statistics.started, ended=ended, duration=duration)

    def discard(self, user_id: int) -> None:
        """Drop a record without reporting it."""
        self._state.tracking.pop(user_id, None)
