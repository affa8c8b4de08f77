from dataclasses import dataclass
from typing import Any

from styngr.errors import MissingFieldError


@dataclass
class Track:
    """A track as returned by the playlist backend."""

    track_id: str
    title: str
    artist_names: list[str]
    is_liked: bool
    asset_id: str | None  # customMetadata.id
    asset_key: str | None  # customMetadata.key, never sent to clients as-is
    playlist_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any], playlist_id: str | None = None) -> "Track":
        if not isinstance(payload, dict) or not payload.get("trackId"):
            raise MissingFieldError("trackId")

        custom_metadata = payload.get("customMetadata") or {}

        return cls(
            track_id=str(payload["trackId"]),
            title=payload.get("title", ""),
            artist_names=list(payload.get("artistNames", [])),
            is_liked=bool(payload.get("isLiked", False)),
            asset_id=custom_metadata.get("id"),
            asset_key=custom_metadata.get("key"),
            playlist_id=playlist_id or payload.get("playlistId"),
        )

    @property
    def artist_str(self) -> str:
        """Artists joined for display."""
        return ", ".join(self.artist_names) or "Unknown"


@dataclass
class ClientTrack:
    """What a user's client receives: the asset key is encrypted for that user only."""

    title: str
    artist_names: list[str]
    is_liked: bool
    asset_id: str
    encryption_key: str
    playlist_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "artistNames": self.artist_names,
            "isLiked": self.is_liked,
            "assetId": self.asset_id,
            "encryptionKey": self.encryption_key,
            "playlistId": self.playlist_id,
        }


@dataclass
class Playlist:
    """Playlist metadata from the user's catalog."""

    id: str
    title: str | None
    description: str | None
    duration: int
    track_count: int

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Playlist":
        if not isinstance(payload, dict) or not payload.get("id"):
            raise MissingFieldError("playlists[].id")

        return cls(
            id=str(payload["id"]),
            title=payload.get("title"),
            description=payload.get("description"),
            duration=int(payload.get("duration") or 0),
            track_count=int(payload.get("trackCount") or 0),
        )

    @property
    def duration_str(self) -> str:
        """Format duration as H:MM:SS or MM:SS"""
        hours, rest = divmod(self.duration, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"
