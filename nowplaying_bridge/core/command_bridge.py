import logging
import math
from numbers import Real
from typing import Any, final

from nowplaying_bridge.core.interfaces import CommandHandlers, CommandRegistrar
from nowplaying_bridge.core.models import CommandResult, TransportCommand
from nowplaying_bridge.core.status_client import StatusClient


log = logging.getLogger(__name__)


def position_to_ms(position: Any) -> int | None:
    """Converts an OS position value in seconds to milliseconds, or None if it isn't one."""

    if isinstance(position, bool) or not isinstance(position, Real):
        return None
    seconds = float(position)
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return int(seconds * 1000)


@final
class CommandBridge:
    """
    Routes OS media commands to the daemon. Each handler issues exactly one
    request and acknowledges right away; the request itself is fire-and-forget.
    """

    def __init__(self, client: StatusClient, registrar: CommandRegistrar):
        self._client = client
        self._registrar = registrar

    def register(self) -> None:
        self._registrar.register(
            CommandHandlers(
                toggle_play_pause=self.toggle_play_pause,
                play=self.play,
                pause=self.pause,
                next_track=self.next_track,
                previous_track=self.previous_track,
                change_position=self.change_position,
            )
        )
        log.info("Media command handlers registered.")

    def _send(self, command: TransportCommand) -> CommandResult:
        log.info(f"Media command received, sending '{command.value}'.")
        self._client.send_transport_command(command)
        return CommandResult.SUCCESS

    def toggle_play_pause(self) -> CommandResult:
        return self._send(TransportCommand.PLAYPAUSE)

    def play(self) -> CommandResult:
        return self._send(TransportCommand.RESUME)

    def pause(self) -> CommandResult:
        return self._send(TransportCommand.PAUSE)

    def next_track(self) -> CommandResult:
        return self._send(TransportCommand.NEXT)

    def previous_track(self) -> CommandResult:
        return self._send(TransportCommand.PREV)

    def change_position(self, position: Any) -> CommandResult:
        position_ms = position_to_ms(position)
        if position_ms is None:
            log.warning(f"Ignoring seek request with unusable position {position!r}")
            return CommandResult.FAILED

        log.info(f"Seek requested to {position_ms} ms.")
        self._client.send_seek(position_ms)
        return CommandResult.SUCCESS
