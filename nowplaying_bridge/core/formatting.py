from nowplaying_bridge.core.models import PlaybackStatus


IDLE_TEXT = "Ready (nothing playing)"


def format_time(ms: int) -> str:
    """Formats milliseconds as m:ss."""

    total = max(0, ms) // 1000
    return f"{total // 60}:{total % 60:02d}"


def describe_status(status: PlaybackStatus) -> str:
    """One-line, human readable description of a status, used in log output."""

    track = status.track
    if status.stopped or track is None:
        return IDLE_TEXT

    state = "paused" if status.paused else "playing"
    position = format_time(track.position_ms)
    duration = format_time(track.duration_ms)
    return f"{track.artist} - {track.name} [{track.album_name}] {position} / {duration} ({state})"
