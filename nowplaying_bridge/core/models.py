from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PlaybackPhase(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    INTERRUPTED = "interrupted"


class TransportCommand(str, Enum):
    """Payload-free control verbs, named after the daemon's /player/<verb> routes."""

    PLAYPAUSE = "playpause"
    RESUME = "resume"
    PAUSE = "pause"
    NEXT = "next"
    PREV = "prev"


class CommandResult(Enum):
    SUCCESS = "success"
    FAILED = "failed"


class PayloadError(ValueError):
    """Raised when a status payload does not have the expected shape."""


def _field(payload: dict[str, Any], key: str, expected: type, optional: bool = False) -> Any:
    value = payload.get(key)
    if value is None:
        if optional:
            return None
        raise PayloadError(f"missing field '{key}'")

    # bool is a subclass of int, so integers need an explicit exclusion.
    if expected is int and isinstance(value, bool):
        raise PayloadError(f"field '{key}' must be an integer, got a boolean")
    if expected is int and isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, expected):
        raise PayloadError(f"field '{key}' must be {expected.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Track:
    uri: str
    name: str
    artists: tuple[str, ...]
    album_name: str
    album_art_url: str | None
    position_ms: int
    duration_ms: int

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "Track":
        artists = _field(payload, "artist_names", list)
        if not all(isinstance(a, str) for a in artists):
            raise PayloadError("field 'artist_names' must contain only strings")

        return cls(
            uri=_field(payload, "uri", str),
            name=_field(payload, "name", str),
            artists=tuple(artists),
            album_name=_field(payload, "album_name", str),
            album_art_url=_field(payload, "album_cover_url", str, optional=True) or None,
            position_ms=_field(payload, "position", int),
            duration_ms=_field(payload, "duration", int),
        )

    @property
    def artist(self) -> str:
        return ", ".join(self.artists)


@dataclass(frozen=True)
class PlaybackStatus:
    """One point-in-time snapshot of the daemon, as returned by GET /status."""

    stopped: bool
    paused: bool
    buffering: bool
    volume: int
    volume_steps: int
    track: Track | None = None

    @classmethod
    def from_json(cls, payload: Any) -> "PlaybackStatus":
        if not isinstance(payload, dict):
            raise PayloadError(f"status body must be a JSON object, got {type(payload).__name__}")

        track_payload = _field(payload, "track", dict, optional=True)

        return cls(
            stopped=_field(payload, "stopped", bool),
            paused=_field(payload, "paused", bool),
            buffering=_field(payload, "buffering", bool),
            volume=_field(payload, "volume", int),
            volume_steps=_field(payload, "volume_steps", int),
            track=Track.from_json(track_payload) if track_payload is not None else None,
        )


@dataclass(frozen=True)
class NowPlayingSnapshot:
    title: str
    artist: str
    album: str
    duration_seconds: float
    elapsed_seconds: float
    rate: float
    phase: PlaybackPhase
    artwork: Any = None  # a decoded QImage, opaque to the engine


@dataclass
class PublishedState:
    last_track_uri: str | None = None
    cached_artwork: Any = None
    cached_artwork_url: str | None = None


@dataclass
class DaemonConfig:
    base_url: str
    request_timeout_s: float


@dataclass
class AppConfig:
    daemon: DaemonConfig
    poll_interval_ms: int
    data_directory: str
    config_path: str = field(default="")
