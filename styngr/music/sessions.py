import logging
from typing import Any, Callable

from styngr.clients.cloud import CloudClient
from styngr.errors import MissingFieldError, NoActiveSessionError, PlaylistNotFoundError
from styngr.models.session import PlaylistSession
from styngr.models.statistics import FinalizedStatistics
from styngr.models.track import Playlist, Track
from styngr.music.state import SessionState
from styngr.music.tracker import PlaybackTracker
from styngr.music.transactions import TransactionFlow
from styngr.utils.clock import current_utc_offset, to_iso_timestamp
from styngr.utils.durations import seconds_to_duration

logger = logging.getLogger(__name__)

PLAYLISTS_PATH = "/v2/sdk/integration/playlists"
TRACK_FORMAT = "AAC"

END_REASON_COMPLETED = "completed"
END_REASON_SKIP = "skip"


class SessionManager:
    """Owns every user's playlist session and drives start/next/skip against the backend.

    Each transition reports the finished track's statistics. They stay
    buffered until the backend accepts them, so a failed next/skip can be
    retried without losing telemetry.
    """

    def __init__(
        self,
        cloud: CloudClient,
        tracker: PlaybackTracker,
        transactions: TransactionFlow,
        state: SessionState,
        bundle: str,
        utc_offset: Callable[[], str] = current_utc_offset,
    ):
        self._cloud = cloud
        self._tracker = tracker
        self._transactions = transactions
        self._state = state
        self._bundle = bundle
        self._utc_offset = utc_offset

    def get_session(self, user_id: int) -> PlaylistSession | None:
        return self._state.sessions.get(user_id)

    def get_catalog(self, user_id: int) -> dict[str, Playlist]:
        return self._state.playlists.get(user_id, {})

    def _require_playlist(self, user_id: int, playlist_id: str) -> Playlist:
        playlist = self.get_catalog(user_id).get(playlist_id)
        if playlist is None:
            raise PlaylistNotFoundError(f"Playlist {playlist_id} does not exist for user {user_id}")
        return playlist

    async def get_playlists(self, user_id: int) -> dict[str, Any]:
        """Make sure the user is entitled, then fetch and remember their playlists."""
        async with self._state.lock_for(user_id):
            await self._transactions.create_and_confirm_transaction(user_id, self._bundle)

            token = await self._cloud.get_token(user_id)
            result = await self._cloud.call(token, PLAYLISTS_PATH, "GET")

            body = result.json()
            if not isinstance(body, dict) or not isinstance(body.get("playlists"), list):
                raise MissingFieldError("playlists")

            catalog = {}
            for item in body["playlists"]:
                playlist = Playlist.from_payload(item)
                catalog[playlist.id] = playlist
            self._state.playlists[user_id] = catalog

            logger.info("User %s has %d playlist(s)", user_id, len(catalog))
            return body

    async def start_playlist_session(self, user_id: int, playlist_id: str) -> PlaylistSession:
        async with self._state.lock_for(user_id):
            self._require_playlist(user_id, playlist_id)

            token = await self._cloud.get_token(user_id)
            result = await self._cloud.call(
                token,
                f"{PLAYLISTS_PATH}/{playlist_id}/start?trackFormat={TRACK_FORMAT}&createAssetUrl=false",
                "POST",
            )

            body = result.json()
            if not isinstance(body, dict) or not body.get("sessionId"):
                raise MissingFieldError("sessionId")
            track = Track.from_payload(body.get("track"), playlist_id=playlist_id)

            previous = self._state.sessions.get(user_id)
            if previous is not None:
                # The backend is not told about the old session
                logger.warning(
                    "User %s started session %s, superseding %s",
                    user_id, body["sessionId"], previous.session_id,
                )
            self._tracker.discard(user_id)
            self._state.pending.pop(user_id, None)

            session = PlaylistSession(
                session_id=str(body["sessionId"]),
                playlist_id=playlist_id,
                track=track,
                tracks_played=1,
            )
            self._tracker.start_track(user_id)
            self._state.sessions[user_id] = session
            return session

    async def request_next_track(self, user_id: int) -> PlaylistSession:
        """Report the current track as completed and move to the next one."""
        return await self._advance(user_id, "next", END_REASON_COMPLETED)

    async def skip_track(self, user_id: int) -> PlaylistSession:
        """Report the current track as skipped and move to the next one."""
        return await self._advance(user_id, "skip", END_REASON_SKIP)

    async def _advance(self, user_id: int, action: str, end_reason: str) -> PlaylistSession:
        async with self._state.lock_for(user_id):
            session = self._state.sessions.get(user_id)
            if session is None:
                raise NoActiveSessionError(f"No session found for user {user_id}")

            self._require_playlist(user_id, session.playlist_id)

            # Resubmit what a failed transition could not deliver
            statistics = self._state.pending.get(user_id)
            if statistics is None:
                statistics = self._tracker.end_track(user_id)
                self._state.pending[user_id] = statistics

            body = self.build_statistics_body(session, statistics, end_reason)

            token = await self._cloud.get_token(user_id)
            result = await self._cloud.call(
                token,
                f"{PLAYLISTS_PATH}/{session.playlist_id}/{action}?createAssetUrl=false",
                "POST",
                body,
            )
            # A response without a usable track keeps the statistics buffered
            track = Track.from_payload(result.json(), playlist_id=session.playlist_id)
            self._state.pending.pop(user_id, None)

            session.track = track
            session.tracks_played += 1
            self._tracker.start_track(user_id)

            logger.debug(
                "User %s: %s -> track %s (%d played)",
                user_id, end_reason, track.track_id, session.tracks_played,
            )
            return session

    def build_statistics_body(
        self,
        session: PlaylistSession,
        statistics: FinalizedStatistics,
        end_reason: str,
    ) -> dict[str, Any]:
        """Body of a next/skip call carrying the finished track's telemetry."""
        return {
            "sessionId": session.session_id,
            "format": TRACK_FORMAT,
            "statistics": [
                {
                    "trackId": session.track.track_id,
                    "playlistId": session.playlist_id,
                    "start": to_iso_timestamp(statistics.started),
                    "duration": seconds_to_duration(statistics.duration),
                    "useType": "streaming",
                    "autoplay": True,
                    "isMuted": False,
                    "endStreamReason": end_reason,
                    "clientTimestampOffset": self._utc_offset(),
                    "playlistSessionId": session.session_id,
                }
            ],
        }

    async def end_session(self, user_id: int) -> PlaylistSession | None:
        """Forget the user's session and local state. The backend is not notified.

        Waits for an in-flight transition so it cannot restore the session afterwards.
        """
        async with self._state.lock_for(user_id):
            session = self._state.sessions.get(user_id)
            self._state.remove(user_id)
        if session is not None:
            logger.info("Ended session %s for user %s", session.session_id, user_id)
        return session
