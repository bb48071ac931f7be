import os

import toml

from nowplaying_bridge.core.config import (
    CONFIG_FILE_NAME,
    DEFAULT_BASE_URL,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_REQUEST_TIMEOUT_S,
    MIN_POLL_INTERVAL_MS,
    load_config,
)


def write_config(tmp_path, content: str):
    (tmp_path / CONFIG_FILE_NAME).write_text(content)


def test_creates_default_file_when_missing(tmp_path):
    config = load_config(str(tmp_path))

    assert config.daemon.base_url == DEFAULT_BASE_URL
    assert config.daemon.request_timeout_s == DEFAULT_REQUEST_TIMEOUT_S
    assert config.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
    assert os.path.exists(config.config_path)
    assert toml.load(config.config_path)["daemon"]["base_url"] == DEFAULT_BASE_URL


def test_reads_user_values(tmp_path):
    write_config(tmp_path, 'poll_interval_ms = 1500\n[daemon]\nbase_url = "http://mini.local:3678/"\nrequest_timeout_s = 1.5\n')

    config = load_config(str(tmp_path))

    assert config.daemon.base_url == "http://mini.local:3678"
    assert config.daemon.request_timeout_s == 1.5
    assert config.poll_interval_ms == 1500


def test_poll_interval_has_a_floor(tmp_path):
    write_config(tmp_path, "poll_interval_ms = 10\n")

    assert load_config(str(tmp_path)).poll_interval_ms == MIN_POLL_INTERVAL_MS


def test_invalid_values_fall_back_to_defaults(tmp_path):
    write_config(tmp_path, 'poll_interval_ms = "often"\n[daemon]\nbase_url = "ftp://nope"\n')

    config = load_config(str(tmp_path))

    assert config.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
    assert config.daemon.base_url == DEFAULT_BASE_URL


def test_undecodable_file_falls_back_to_defaults(tmp_path):
    write_config(tmp_path, "this is = = not toml")

    assert load_config(str(tmp_path)).daemon.base_url == DEFAULT_BASE_URL


def test_written_file_only_holds_the_base_url(tmp_path):
    config = load_config(str(tmp_path))

    written = toml.load(config.config_path)

    assert written == {"daemon": {"base_url": DEFAULT_BASE_URL}}
