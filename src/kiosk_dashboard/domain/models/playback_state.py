"""Music playback domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Track:
    """The currently loaded track."""

    id: str
    name: str
    artist: str
    album: str
    art_url: str | None
    duration_ms: int
    progress_ms: int
    is_playing: bool
    uri: str


@dataclass(frozen=True)
class PlaybackDevice:
    """A playback device known to the music account."""

    id: str | None
    name: str
    type: str
    volume: int | None
    is_active: bool = False
    is_restricted: bool = False
    supports_volume: bool = True


@dataclass(frozen=True)
class PlaybackState:
    """What is playing, where, and whether we are allowed to ask."""

    track: Track | None
    device: PlaybackDevice | None
    is_connected: bool
    is_authenticated: bool

    @classmethod
    def unauthenticated(cls) -> "PlaybackState":
        return cls(track=None, device=None, is_connected=False, is_authenticated=False)

    @classmethod
    def disconnected(cls) -> "PlaybackState":
        return cls(track=None, device=None, is_connected=False, is_authenticated=True)
