# pyright: reportUnknownMemberType=false, reportAny=false

import dataclasses
import logging
from collections.abc import Callable
from typing import Any, final

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from nowplaying_bridge.core.artwork import ArtworkFetcher
from nowplaying_bridge.core.command_bridge import CommandBridge
from nowplaying_bridge.core.formatting import describe_status
from nowplaying_bridge.core.interfaces import NowPlayingPublisher
from nowplaying_bridge.core.models import NowPlayingSnapshot, PlaybackPhase, PlaybackStatus
from nowplaying_bridge.core.reconciler import Cleared, NoTrack, StateReconciler
from nowplaying_bridge.core.status_client import (
    DaemonUnreachableError,
    StatusClient,
    StatusError,
    run_in_daemon_thread,
)


DEFAULT_POLL_INTERVAL_MS = 2000

log = logging.getLogger(__name__)


@final
class Poller(QObject):
    """
    Drives the bridge: polls the daemon on a fixed interval, reconciles every
    status and pushes the result to the OS sink.

    Fetches run on worker threads; their results come back through the
    `status_received` / `status_failed` signals, which Qt delivers on the thread
    this object lives on. Everything that touches published state happens there.
    """

    status_received = Signal(object)
    status_failed = Signal(object)

    def __init__(
        self,
        client: StatusClient,
        reconciler: StateReconciler,
        publisher: NowPlayingPublisher,
        artwork_fetcher: ArtworkFetcher,
        command_bridge: CommandBridge,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        run_in_background: Callable[[Callable[[], None]], None] | None = None,
    ):
        super().__init__()
        self._client = client
        self._reconciler = reconciler
        self._publisher = publisher
        self._artwork_fetcher = artwork_fetcher
        self._command_bridge = command_bridge
        self._interval_ms = interval_ms
        self._run_in_background = run_in_background or (lambda target: run_in_daemon_thread(target, "status-poll"))

        self._running = False
        self._last_published: NowPlayingSnapshot | None = None
        self._last_logged_uri: str | None = None
        self._daemon_reachable: bool | None = None

        self._timer = QTimer(self)
        self._connect_signals()

    def _connect_signals(self):
        _ = self._timer.timeout.connect(self.poll)
        _ = self.status_received.connect(self.apply_status)
        _ = self.status_failed.connect(self.apply_failure)
        _ = self._artwork_fetcher.artwork_ready.connect(self.apply_artwork)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_published(self) -> NowPlayingSnapshot | None:
        return self._last_published

    def start(self) -> None:
        """Registers the command handlers, polls once and then every interval. There is no stop."""

        if self._running:
            return

        self._running = True
        self._command_bridge.register()
        self.poll()
        self._timer.start(self._interval_ms)
        log.info(f"Running (polling {self._client.base_url} every {self._interval_ms} ms)")

    @Slot()
    def poll(self) -> None:
        self._run_in_background(self._fetch_in_background)

    def _fetch_in_background(self):
        try:
            status = self._client.fetch_status()
        except StatusError as e:
            self.status_failed.emit(e)
            return
        self.status_received.emit(status)

    @Slot(object)  # pyright: ignore[reportArgumentType]
    def apply_status(self, status: PlaybackStatus):
        self._note_reachable(True)
        outcome = self._reconciler.reconcile(status)

        if isinstance(outcome, Cleared):
            if self._last_published is not None:
                log.info("Playback stopped, clearing now playing info.")
            self._clear()
            return

        if isinstance(outcome, NoTrack):
            if outcome.interrupted:
                self._publisher.set_phase(PlaybackPhase.INTERRUPTED)
            return

        self._log_track_change(status)
        self._publisher.publish(outcome.snapshot)
        self._last_published = outcome.snapshot

        if outcome.artwork_url_to_fetch:
            self._artwork_fetcher.fetch(outcome.artwork_url_to_fetch)

    @Slot(object)  # pyright: ignore[reportArgumentType]
    def apply_failure(self, error: StatusError):
        if isinstance(error, DaemonUnreachableError):
            self._note_reachable(False, error)
            self._clear()
        else:
            log.debug(f"Dropping poll tick: {error}")

    @Slot(str, object)  # pyright: ignore[reportArgumentType]
    def apply_artwork(self, url: str, image: Any):
        if not self._reconciler.accept_artwork(url, image):
            return
        if self._last_published is None:
            return

        merged = dataclasses.replace(self._last_published, artwork=image)
        self._publisher.publish(merged)
        self._last_published = merged

    def _clear(self):
        self._last_published = None
        self._last_logged_uri = None
        self._publisher.clear()

    def _log_track_change(self, status: PlaybackStatus):
        uri = status.track.uri if status.track else None
        if uri != self._last_logged_uri:
            self._last_logged_uri = uri
            log.info(f"Now playing: {describe_status(status)}")

    def _note_reachable(self, reachable: bool, error: Exception | None = None):
        if reachable == self._daemon_reachable:
            return
        self._daemon_reachable = reachable
        if reachable:
            log.info("Daemon is reachable.")
        else:
            log.warning(f"Daemon unreachable, clearing now playing info: {error}")
