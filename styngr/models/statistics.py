from dataclasses import dataclass
from enum import Enum


class TrackEvent(str, Enum):
    """Playback events reported by a user's client."""

    PLAYED = "PLAYED"
    PAUSED = "PAUSED"
    RESUMED = "RESUMED"
    ENDED = "ENDED"


@dataclass
class PlaybackStatistics:
    """Wall-clock timing of the track a user is currently listening to."""

    started: float | None
    ended: float | None = None
    paused: float | None = None
    total_paused: float = 0.0

    @property
    def is_paused(self) -> bool:
        return self.paused is not None


@dataclass(frozen=True)
class FinalizedStatistics:
    """Snapshot taken when a track ends; duration excludes paused time."""

    started: float
    ended: float
    duration: float
