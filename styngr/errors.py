class StyngrError(Exception):
    """Base class for every error raised by the integration layer."""


class ConfigurationError(StyngrError):
    """Raised when the configuration is missing or invalid."""


class AlreadyTrackingError(StyngrError):
    """A playback record already exists for the user."""


class NotTrackingError(StyngrError):
    """No playback record exists for the user."""


class InvalidStateError(StyngrError):
    """The event is not legal for the user's current playback state."""


class NoActiveSessionError(StyngrError):
    """The user has no playlist session."""


class PlaylistNotFoundError(StyngrError):
    """The playlist is not part of the user's catalog."""


class RemoteError(StyngrError):
    """The remote call failed in transport or returned a non-success status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MissingFieldError(RemoteError):
    """The remote response does not have the expected shape."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"Missing field in response: {field}")
        self.field = field
