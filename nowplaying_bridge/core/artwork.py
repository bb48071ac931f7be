# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false, reportAny=false

import io
import logging
import threading
from collections.abc import Callable
import urllib.request

from PIL import Image, UnidentifiedImageError
from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage


USER_AGENT = "NowPlayingBridge/1.0"
ARTWORK_TIMEOUT_S = 3.0

log = logging.getLogger(__name__)


def decode_image(data: bytes) -> QImage | None:
    """Decodes encoded image bytes (JPEG, PNG, ...) into a QImage, or None."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGBA")
            q_image = QImage(img.tobytes(), img.width, img.height, QImage.Format.Format_RGBA8888)
            # Detach from the Pillow buffer, which does not outlive this block.
            return q_image.copy()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        log.warning(f"Failed to decode artwork: {e}")
        return None


def download_artwork(
    url: str, decode: Callable[[bytes], QImage | None] = decode_image, timeout: float = ARTWORK_TIMEOUT_S
) -> QImage | None:
    """Blocking half of the fetcher. Never raises; failures yield None."""

    try:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            image_data = resp.read()
    except (OSError, ValueError) as e:
        log.warning(f"Failed to load album art from {url}: {e}")
        return None

    return decode(image_data)


class ArtworkFetcher(QObject):
    """
    Downloads album art on a background thread. The result is delivered through
    `artwork_ready(url, image_or_None)`, which Qt queues onto the thread this
    object lives on.
    """

    artwork_ready = Signal(str, object)

    def __init__(
        self,
        decode: Callable[[bytes], QImage | None] = decode_image,
        run_in_background: Callable[[Callable[[], None]], None] | None = None,
        timeout: float = ARTWORK_TIMEOUT_S,
    ):
        super().__init__()
        self._decode = decode
        self._timeout = timeout
        self._run_in_background = run_in_background or self._spawn_thread

    @staticmethod
    def _spawn_thread(target: Callable[[], None]) -> None:
        threading.Thread(target=target, name="artwork-loader", daemon=True).start()

    def fetch(self, url: str) -> None:
        log.info(f"Fetching album art from {url}")
        self._run_in_background(lambda: self.artwork_ready.emit(url, download_artwork(url, self._decode, self._timeout)))
