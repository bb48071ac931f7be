import logging
import threading
from dataclasses import dataclass
from typing import Any, final

from nowplaying_bridge.core.models import NowPlayingSnapshot, PlaybackPhase, PlaybackStatus, PublishedState


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cleared:
    """The daemon reported an explicit stop."""


@dataclass(frozen=True)
class NoTrack:
    """No track in the feed, but no stop either. Only the phase may change."""

    interrupted: bool


@dataclass(frozen=True)
class SnapshotOutcome:
    snapshot: NowPlayingSnapshot
    artwork_url_to_fetch: str | None = None

    @property
    def artwork_refetch_needed(self) -> bool:
        return self.artwork_url_to_fetch is not None


ReconcileOutcome = Cleared | NoTrack | SnapshotOutcome


def playback_phase(status: PlaybackStatus) -> PlaybackPhase:
    if status.paused:
        return PlaybackPhase.PAUSED
    if status.buffering:
        return PlaybackPhase.INTERRUPTED
    return PlaybackPhase.PLAYING


@final
class StateReconciler:
    """
    Owns the published state (last track identity and cached artwork) and decides,
    for every fresh status, what the OS should be shown next.

    The state is single-writer: every call must come from the thread that created
    the reconciler, which is the event-loop thread. Calls from any other thread
    raise RuntimeError instead of racing.
    """

    def __init__(self):
        self._state = PublishedState()
        self._requested_artwork_url: str | None = None
        self._owner_thread_id = threading.get_ident()

    @property
    def state(self) -> PublishedState:
        return self._state

    def _require_owner_thread(self):
        if threading.get_ident() != self._owner_thread_id:
            raise RuntimeError(
                f"StateReconciler used from thread '{threading.current_thread().name}', "
                "it may only be used from the event-loop thread"
            )

    def reconcile(self, status: PlaybackStatus) -> ReconcileOutcome:
        self._require_owner_thread()

        if status.stopped:
            self._state.last_track_uri = None
            return Cleared()

        track = status.track
        if track is None:
            return NoTrack(interrupted=status.buffering)

        artwork_url_to_fetch = None
        if track.uri != self._state.last_track_uri and track.album_art_url:
            # Latched before the fetch completes, so a second status for the same
            # transition cannot start another download.
            self._state.last_track_uri = track.uri
            # A new track sharing the cached cover is not refetched, even though its identity changed.
            if self._state.cached_artwork is not None and self._state.cached_artwork_url == track.album_art_url:
                log.debug(f"Artwork for {track.uri} already cached.")
            else:
                artwork_url_to_fetch = track.album_art_url
                self._requested_artwork_url = track.album_art_url

        phase = playback_phase(status)
        snapshot = NowPlayingSnapshot(
            title=track.name,
            artist=track.artist,
            album=track.album_name,
            duration_seconds=track.duration_ms / 1000.0,
            elapsed_seconds=track.position_ms / 1000.0,
            rate=0.0 if phase is PlaybackPhase.PAUSED else 1.0,
            phase=phase,
            artwork=self._state.cached_artwork,
        )
        return SnapshotOutcome(snapshot, artwork_url_to_fetch)

    def accept_artwork(self, url: str, image: Any) -> bool:
        """
        Stores a finished artwork download in the cache. Returns True when the
        artwork was accepted and should be merged into what is currently shown.
        """

        self._require_owner_thread()

        if url != self._requested_artwork_url:
            log.debug(f"Discarding artwork for superseded URL {url}")
            return False

        self._requested_artwork_url = None
        if image is None:
            return False

        self._state.cached_artwork = image
        self._state.cached_artwork_url = url
        return True
