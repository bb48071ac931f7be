import time

from PySide6.QtCore import QCoreApplication, Qt
from PySide6.QtGui import QImage

from nowplaying_bridge.core.models import PlaybackStatus, Track


def run_now(target):
    target()


def process_events_until(condition, timeout_s=5.0):
    deadline = time.monotonic() + timeout_s
    while not condition() and time.monotonic() < deadline:
        QCoreApplication.processEvents()
        time.sleep(0.01)
    return condition()


def make_track(uri="spotify:track:t1", art_url="https://img.example/t1.jpg", position_ms=1000, **overrides) -> Track:
    fields = dict(
        uri=uri,
        name="Song",
        artists=("A",),
        album_name="Alb",
        album_art_url=art_url,
        position_ms=position_ms,
        duration_ms=200000,
    )
    fields.update(overrides)
    return Track(**fields)


def make_status(track: Track | None = None, stopped=False, paused=False, buffering=False) -> PlaybackStatus:
    return PlaybackStatus(
        stopped=stopped,
        paused=paused,
        buffering=buffering,
        volume=50,
        volume_steps=100,
        track=track,
    )


def make_image(color=Qt.GlobalColor.red) -> QImage:
    image = QImage(4, 4, QImage.Format.Format_RGBA8888)
    image.fill(color)
    return image
