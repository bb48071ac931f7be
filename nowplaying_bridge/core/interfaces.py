from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from nowplaying_bridge.core.models import CommandResult, NowPlayingSnapshot, PlaybackPhase


class NowPlayingPublisher(Protocol):
    """The OS-level "now playing" sink. Only ever called on the event-loop thread."""

    def publish(self, snapshot: NowPlayingSnapshot) -> None: ...

    def clear(self) -> None: ...

    def set_phase(self, phase: PlaybackPhase) -> None: ...


@dataclass(frozen=True)
class CommandHandlers:
    toggle_play_pause: Callable[[], CommandResult]
    play: Callable[[], CommandResult]
    pause: Callable[[], CommandResult]
    next_track: Callable[[], CommandResult]
    previous_track: Callable[[], CommandResult]
    # Receives the raw position from the OS event, in seconds.
    change_position: Callable[[Any], CommandResult]


class CommandRegistrar(Protocol):
    """The OS command surface (media keys, lock screen, remotes)."""

    def register(self, handlers: CommandHandlers) -> None: ...
