# pyright: reportUnknownMemberType=false, reportAttributeAccessIssue=false, reportUnknownArgumentType=false, reportUnknownParameterType=false, reportMissingParameterType=false

import logging
from logging.handlers import RotatingFileHandler
import os
import signal
import sys
from typing import final

from PySide6.QtCore import QObject
from PySide6.QtGui import QGuiApplication

from nowplaying_bridge.core.artwork import ArtworkFetcher
from nowplaying_bridge.core.command_bridge import CommandBridge
from nowplaying_bridge.core.config import APP_NAME, load_config, user_data_dir
from nowplaying_bridge.core.interfaces import CommandRegistrar, NowPlayingPublisher
from nowplaying_bridge.core.models import AppConfig
from nowplaying_bridge.core.poller import Poller
from nowplaying_bridge.core.reconciler import StateReconciler
from nowplaying_bridge.core.status_client import StatusClient


APP_DISPLAY_NAME = "Now Playing Bridge"
LOG_FILE_NAME = "nowplaying-bridge.log"

log = logging.getLogger(__name__)


@final
class BridgeApp(QObject):
    """
    Owns every component of the bridge for the lifetime of the process.
    Must be created on the thread that runs the Qt event loop.
    """

    def __init__(self, config: AppConfig, publisher: NowPlayingPublisher, registrar: CommandRegistrar):
        super().__init__()
        log.info("Starting initialization.")
        self.config = config

        self.status_client = StatusClient(config.daemon)
        log.info(f"StatusClient created for {self.status_client.base_url}.")

        self.reconciler = StateReconciler()
        self.artwork_fetcher = ArtworkFetcher(timeout=config.daemon.request_timeout_s)
        self.command_bridge = CommandBridge(self.status_client, registrar)

        self.poller = Poller(
            self.status_client,
            self.reconciler,
            publisher,
            self.artwork_fetcher,
            self.command_bridge,
            interval_ms=config.poll_interval_ms,
        )
        log.info("Poller has been created.")

        self._setup_shutdown_hooks()

    def _setup_shutdown_hooks(self):
        """Lets Ctrl+C and SIGTERM stop the Qt loop. In-flight requests die with the process."""

        _ = signal.signal(signal.SIGINT, self._on_os_signal)
        _ = signal.signal(signal.SIGTERM, self._on_os_signal)
        log.info("Shutdown hooks registered.")

    def start(self):
        self.poller.start()

    def _on_os_signal(self, *_args):
        log.info("OS shutdown signal received, quitting application.")
        QGuiApplication.quit()


def setup_logging():
    """Configures logging to output to both console and log file."""

    log_formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    try:
        data_dir = user_data_dir()
        os.makedirs(data_dir, exist_ok=True)
        log_file_path = os.path.join(data_dir, LOG_FILE_NAME)

        # 1MB per file, keeping 5 old files
        file_handler = RotatingFileHandler(log_file_path, maxBytes=1 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)
    except Exception as e:
        root_logger.error(f"Failed to set up file logging: {e}")


def _load_initial_config() -> AppConfig:
    try:
        log.info("Loading configuration...")
        config = load_config()
        log.info(f"Configuration loaded from {config.config_path}.")
        return config
    except Exception:
        log.exception("Fatal error: Failed to load configuration.")
        sys.exit(1)


def _create_platform_collaborators() -> tuple[NowPlayingPublisher, CommandRegistrar]:
    if sys.platform != "darwin":
        log.error(f"No now playing integration is available for {sys.platform}.")
        sys.exit(1)

    from nowplaying_bridge.integrations.macos import MacCommandRegistrar, MacNowPlayingPublisher, hide_from_dock

    # Media keys are only delivered to an app with a running event loop.
    hide_from_dock()
    return MacNowPlayingPublisher(), MacCommandRegistrar()


def main() -> None:
    setup_logging()
    log.info(f"--- Starting {APP_DISPLAY_NAME} ---")

    app = QGuiApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_DISPLAY_NAME)

    config = _load_initial_config()
    publisher, registrar = _create_platform_collaborators()

    bridge_app = BridgeApp(config, publisher, registrar)
    bridge_app.start()

    log.info("Entering Qt main event loop...")
    exit_code = app.exec()
    log.info(f"--- Stopped {APP_DISPLAY_NAME} ---")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
