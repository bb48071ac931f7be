# pyright: reportAny=false, reportUnknownMemberType=false

import logging
import os
import sys

import toml

from nowplaying_bridge.core.models import AppConfig, DaemonConfig


APP_NAME = "NowPlayingBridge"
CONFIG_FILE_NAME = "config.toml"
DEFAULT_BASE_URL = "http://localhost:3678"
DEFAULT_REQUEST_TIMEOUT_S = 3.0
DEFAULT_POLL_INTERVAL_MS = 2000
MIN_POLL_INTERVAL_MS = 250

log = logging.getLogger(__name__)


def user_data_dir() -> str:
    home = os.path.expanduser("~")
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA", os.path.join(home, "AppData", "Roaming"))
    elif sys.platform == "darwin":
        base = os.path.join(home, "Library", "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", os.path.join(home, ".config"))
    return os.path.join(base, APP_NAME)


def get_default_config(data_directory: str | None = None) -> AppConfig:
    data_directory = data_directory or user_data_dir()

    return AppConfig(
        daemon=DaemonConfig(base_url=DEFAULT_BASE_URL, request_timeout_s=DEFAULT_REQUEST_TIMEOUT_S),
        poll_interval_ms=DEFAULT_POLL_INTERVAL_MS,
        data_directory=data_directory,
        config_path=os.path.join(data_directory, CONFIG_FILE_NAME),
    )


def save_config(config: AppConfig):
    """
    Writes the base URL. `poll_interval_ms` and `daemon.request_timeout_s` are
    advanced overrides: read when present, never written, so the defaults stay fixed.
    """

    config_to_save = {
        "daemon": {
            "base_url": config.daemon.base_url,
        },
    }

    try:
        os.makedirs(os.path.dirname(config.config_path), exist_ok=True)
        with open(config.config_path, "w") as f:
            _ = toml.dump(config_to_save, f)
    except (IOError, OSError) as e:
        log.error(f"Failed to save configuration to {config.config_path}: {e}")


def load_config(data_directory: str | None = None) -> AppConfig:
    """
    Loads configuration from the user's file, falling back to defaults
    for any missing or invalid values. Creates the file if it doesn't exist.
    """

    config = get_default_config(data_directory)

    if not os.path.exists(config.config_path):
        save_config(config)
        return config

    try:
        with open(config.config_path, "r") as f:
            user_config = toml.load(f)
    except toml.TomlDecodeError as e:
        log.warning(f"Failed to decode config file, using defaults. Error: {e}")
        return config

    try:
        poll_interval_ms = int(user_config.get("poll_interval_ms", config.poll_interval_ms))
        config.poll_interval_ms = max(MIN_POLL_INTERVAL_MS, poll_interval_ms)
    except (ValueError, TypeError):
        log.warning("Invalid 'poll_interval_ms' in config, using the default.")

    daemon_section = user_config.get("daemon", {})
    if isinstance(daemon_section, dict):
        try:
            base_url = str(daemon_section.get("base_url", config.daemon.base_url)).strip()  # pyright: ignore[reportUnknownArgumentType]
            timeout = float(daemon_section.get("request_timeout_s", config.daemon.request_timeout_s))  # pyright: ignore[reportUnknownArgumentType]
            if not base_url.startswith(("http://", "https://")):
                raise ValueError(f"unsupported base URL {base_url!r}")
            if timeout <= 0:
                raise ValueError("timeout must be positive")
            config.daemon.base_url = base_url.rstrip("/")
            config.daemon.request_timeout_s = timeout
        except (ValueError, TypeError) as e:
            log.warning(f"Invalid value in 'daemon' section of config, using defaults. Error: {e}")

    return config
