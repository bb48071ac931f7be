# pyright: reportAny=false, reportUnknownMemberType=false

import logging
import threading
from collections.abc import Callable
from typing import Any, final

import requests

from nowplaying_bridge.core.models import DaemonConfig, PayloadError, PlaybackStatus, TransportCommand


USER_AGENT = "NowPlayingBridge/1.0"

log = logging.getLogger(__name__)


class StatusError(Exception):
    """Base class for failures of a status fetch."""


class DaemonUnreachableError(StatusError):
    """The daemon could not be reached: refused, timed out, DNS failure."""


class StatusDecodeError(StatusError):
    """The daemon answered, but not with a usable status."""


def run_in_daemon_thread(target: Callable[[], None], name: str = "daemon-request") -> None:
    threading.Thread(target=target, name=name, daemon=True).start()


@final
class StatusClient:
    """
    Talks to the playback daemon's HTTP API. Status fetches are blocking and are
    expected to run off the event loop; control requests are fire-and-forget.
    """

    def __init__(
        self,
        config: DaemonConfig,
        session: requests.Session | None = None,
        dispatch: Callable[[Callable[[], None]], None] | None = None,
    ):
        self._base_url = config.base_url.rstrip("/")
        self._timeout = config.request_timeout_s
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        self._dispatch = dispatch or run_in_daemon_thread

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_status(self) -> PlaybackStatus:
        """
        Performs GET /status and decodes the body.
        Raises DaemonUnreachableError or StatusDecodeError, never anything else.
        """

        url = f"{self._base_url}/status"
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise DaemonUnreachableError(f"cannot connect to daemon at {self._base_url}: {e}") from e

        if resp.status_code >= 400:
            raise StatusDecodeError(f"daemon answered {resp.status_code} for {url}")

        try:
            return PlaybackStatus.from_json(resp.json())
        except (ValueError, RecursionError, PayloadError) as e:
            raise StatusDecodeError(f"malformed status body from {url}: {e}") from e

    def send_transport_command(self, command: TransportCommand) -> None:
        self._post_in_background(f"/player/{command.value}")

    def send_seek(self, position_ms: int) -> None:
        self._post_in_background("/player/seek", {"position": int(position_ms)})

    def _post_in_background(self, path: str, payload: dict[str, Any] | None = None) -> None:
        self._dispatch(lambda: self._post(path, payload))

    def _post(self, path: str, payload: dict[str, Any] | None) -> None:
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.post(url, json=payload, timeout=self._timeout)
            if resp.status_code >= 400:
                log.debug(f"Daemon rejected POST {path} with {resp.status_code}")
        except requests.RequestException as e:
            log.debug(f"POST {path} failed, dropping it: {e}")
