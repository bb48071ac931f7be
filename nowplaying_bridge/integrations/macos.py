# pyright: reportMissingImports=false, reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false, reportAny=false, reportAttributeAccessIssue=false

import logging
from typing import Any, final

import MediaPlayer
from AppKit import NSApplication, NSApplicationActivationPolicyAccessory, NSImage
from Foundation import NSData
from PySide6.QtCore import QBuffer, QIODevice
from PySide6.QtGui import QImage

from nowplaying_bridge.core.interfaces import CommandHandlers
from nowplaying_bridge.core.models import CommandResult, NowPlayingSnapshot, PlaybackPhase


PLAYBACK_STATES = {
    PlaybackPhase.STOPPED: MediaPlayer.MPNowPlayingPlaybackStateStopped,
    PlaybackPhase.PLAYING: MediaPlayer.MPNowPlayingPlaybackStatePlaying,
    PlaybackPhase.PAUSED: MediaPlayer.MPNowPlayingPlaybackStatePaused,
    PlaybackPhase.INTERRUPTED: MediaPlayer.MPNowPlayingPlaybackStateInterrupted,
}

HANDLER_STATUSES = {
    CommandResult.SUCCESS: MediaPlayer.MPRemoteCommandHandlerStatusSuccess,
    CommandResult.FAILED: MediaPlayer.MPRemoteCommandHandlerStatusCommandFailed,
}

log = logging.getLogger(__name__)


def hide_from_dock():
    """Runs as an accessory app: no Dock icon, no menu bar, but still gets media keys."""

    NSApplication.sharedApplication().setActivationPolicy_(NSApplicationActivationPolicyAccessory)


def _ns_image_from_qimage(image: QImage) -> Any:
    buffer = QBuffer()
    _ = buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    _ = image.save(buffer, "PNG")
    data = bytes(buffer.data())
    buffer.close()
    return NSImage.alloc().initWithData_(NSData.dataWithBytes_length_(data, len(data)))


@final
class MacNowPlayingPublisher:
    """Publishes snapshots to MPNowPlayingInfoCenter."""

    def __init__(self):
        self._info_center = MediaPlayer.MPNowPlayingInfoCenter.defaultCenter()
        self._artwork_source: QImage | None = None
        self._artwork: Any = None

    def _artwork_for(self, image: QImage) -> Any:
        # The same QImage is republished every poll, convert it only once.
        if image is not self._artwork_source:
            ns_image = _ns_image_from_qimage(image)
            self._artwork = MediaPlayer.MPMediaItemArtwork.alloc().initWithBoundsSize_requestHandler_(
                ns_image.size(), lambda _size: ns_image
            )
            self._artwork_source = image
        return self._artwork

    def publish(self, snapshot: NowPlayingSnapshot) -> None:
        info = {
            MediaPlayer.MPMediaItemPropertyTitle: snapshot.title,
            MediaPlayer.MPMediaItemPropertyArtist: snapshot.artist,
            MediaPlayer.MPMediaItemPropertyAlbumTitle: snapshot.album,
            MediaPlayer.MPMediaItemPropertyPlaybackDuration: snapshot.duration_seconds,
            MediaPlayer.MPNowPlayingInfoPropertyElapsedPlaybackTime: snapshot.elapsed_seconds,
            MediaPlayer.MPNowPlayingInfoPropertyPlaybackRate: snapshot.rate,
            MediaPlayer.MPNowPlayingInfoPropertyMediaType: MediaPlayer.MPNowPlayingInfoMediaTypeAudio,
        }
        if snapshot.artwork is not None:
            info[MediaPlayer.MPMediaItemPropertyArtwork] = self._artwork_for(snapshot.artwork)

        self._info_center.setPlaybackState_(PLAYBACK_STATES[snapshot.phase])
        self._info_center.setNowPlayingInfo_(info)

    def clear(self) -> None:
        self._info_center.setPlaybackState_(PLAYBACK_STATES[PlaybackPhase.STOPPED])
        self._info_center.setNowPlayingInfo_(None)

    def set_phase(self, phase: PlaybackPhase) -> None:
        self._info_center.setPlaybackState_(PLAYBACK_STATES[phase])


def _position_of(event: Any) -> Any:
    position_time = getattr(event, "positionTime", None)
    if position_time is None:
        return None
    return position_time() if callable(position_time) else position_time


@final
class MacCommandRegistrar:
    """Registers handlers with MPRemoteCommandCenter."""

    def __init__(self):
        self._command_center = MediaPlayer.MPRemoteCommandCenter.sharedCommandCenter()
        self._targets: list[Any] = []

    def _add(self, command: Any, handler: Any):
        command.setEnabled_(True)
        self._targets.append(command.addTargetWithHandler_(lambda event: HANDLER_STATUSES[handler(event)]))

    def register(self, handlers: CommandHandlers) -> None:
        center = self._command_center
        self._add(center.togglePlayPauseCommand(), lambda _event: handlers.toggle_play_pause())
        self._add(center.playCommand(), lambda _event: handlers.play())
        self._add(center.pauseCommand(), lambda _event: handlers.pause())
        self._add(center.nextTrackCommand(), lambda _event: handlers.next_track())
        self._add(center.previousTrackCommand(), lambda _event: handlers.previous_track())
        self._add(center.changePlaybackPositionCommand(), lambda event: handlers.change_position(_position_of(event)))
        log.info(f"Registered {len(self._targets)} remote commands with MPRemoteCommandCenter.")
