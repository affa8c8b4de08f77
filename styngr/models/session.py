from dataclasses import dataclass

from styngr.models.track import Track


@dataclass
class PlaylistSession:
    """A user's active playlist session, mirrored from the backend."""

    session_id: str
    playlist_id: str
    track: Track
    tracks_played: int = 1
