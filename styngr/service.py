import logging
import time
from typing import Any, Callable

import httpx

from styngr.clients.cloud import CloudClient
from styngr.clients.region import RegionResolver, StaticRegionResolver
from styngr.config import Configuration
from styngr.errors import ConfigurationError, MissingFieldError
from styngr.models.session import PlaylistSession
from styngr.models.statistics import PlaybackStatistics, TrackEvent
from styngr.models.track import ClientTrack, Track
from styngr.music.sessions import SessionManager
from styngr.music.state import SessionState
from styngr.music.tracker import PlaybackTracker
from styngr.music.transactions import TransactionFlow
from styngr.utils.crypto import KeyEncryptor

logger = logging.getLogger(__name__)

LISTENING_EVENTS = (TrackEvent.PLAYED, TrackEvent.RESUMED)


class StyngrService:
    """Entry point for the host: every server-side radio operation goes through here."""

    def __init__(self):
        self._configuration: Configuration | None = None
        self._cloud: CloudClient | None = None
        self._state: SessionState | None = None
        self._tracker: PlaybackTracker | None = None
        self._transactions: TransactionFlow | None = None
        self._sessions: SessionManager | None = None
        self._encryptor: KeyEncryptor | None = None

    def set_configuration(
        self,
        configuration: Configuration | dict[str, Any],
        http_client: httpx.AsyncClient | None = None,
        regions: RegionResolver | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Set up the service with API credentials.

        Reconfiguring drops all sessions and tracking. The previous HTTP
        client is not closed; call close() first if it should be.
        """
        if not isinstance(configuration, Configuration):
            configuration = Configuration.from_dict(configuration)

        self._configuration = configuration
        self._cloud = CloudClient(configuration, http_client=http_client)
        self._state = SessionState()
        self._tracker = PlaybackTracker(self._state, clock=clock)
        self._transactions = TransactionFlow(
            self._cloud,
            regions or StaticRegionResolver(configuration.billing_country),
        )
        self._sessions = SessionManager(
            self._cloud,
            self._tracker,
            self._transactions,
            self._state,
            bundle=configuration.bundle,
        )
        self._encryptor = KeyEncryptor(configuration.secret)

        logger.info("Configured for app %s against %s", configuration.app_id, configuration.api_server)

    @property
    def configured(self) -> bool:
        return self._configuration is not None

    def _require_configuration(self) -> None:
        if not self.configured:
            raise ConfigurationError(
                "Please initialize StyngrService using set_configuration() before calling this method!"
            )

    @property
    def configuration(self) -> Configuration:
        self._require_configuration()
        return self._configuration

    @property
    def sessions(self) -> SessionManager:
        self._require_configuration()
        return self._sessions

    async def get_playlists(self, user_id: int) -> dict[str, Any]:
        self._require_configuration()
        return await self._sessions.get_playlists(user_id)

    async def start_playlist_session(self, user_id: int, playlist_id: str) -> PlaylistSession:
        self._require_configuration()
        if not isinstance(playlist_id, str):
            raise TypeError("Playlist ID is not a string")
        return await self._sessions.start_playlist_session(user_id, playlist_id)

    async def request_next_track(self, user_id: int) -> PlaylistSession:
        self._require_configuration()
        return await self._sessions.request_next_track(user_id)

    async def skip_track(self, user_id: int) -> PlaylistSession:
        self._require_configuration()
        return await self._sessions.skip_track(user_id)

    async def create_and_confirm_transaction(self, user_id: int, bundle: str | None = None) -> str:
        self._require_configuration()
        return await self._transactions.create_and_confirm_transaction(
            user_id, bundle or self._configuration.bundle
        )

    async def get_available_radio_bundles(self, user_id: int) -> list[dict[str, Any]]:
        self._require_configuration()
        return await self._transactions.get_available_radio_bundles(user_id)

    def record_client_event(self, user_id: int, event: TrackEvent | str) -> PlaybackStatistics:
        """Apply a client playback event and update whether the user is listening."""
        self._require_configuration()
        statistics = self._tracker.record_event(user_id, event)
        self._state.listening[user_id] = TrackEvent(event) in LISTENING_EVENTS
        return statistics

    def is_listening(self, user_id: int) -> bool:
        self._require_configuration()
        return self._state.listening.get(user_id, False)

    def build_client_track(self, user_id: int, track: Track) -> ClientTrack:
        """Project a backend track into what the user's client may see."""
        self._require_configuration()
        if not track.asset_id or not track.asset_key:
            raise MissingFieldError(
                "customMetadata", "Track's custom metadata does not contain necessary information."
            )
        if not track.playlist_id:
            raise MissingFieldError("playlistId")

        return ClientTrack(
            title=track.title,
            artist_names=list(track.artist_names),
            is_liked=track.is_liked,
            asset_id=track.asset_id,
            encryption_key=self._encryptor.encrypt_for_user(track.asset_key, user_id),
            playlist_id=track.playlist_id,
        )

    async def end_session(self, user_id: int) -> PlaylistSession | None:
        """Drop everything held for a user, e.g. when they disconnect."""
        self._require_configuration()
        self._cloud.forget_token(user_id)
        return await self._sessions.end_session(user_id)

    async def close(self) -> None:
        if self._cloud is not None:
            await self._cloud.aclose()
