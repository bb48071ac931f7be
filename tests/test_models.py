import pytest

from nowplaying_bridge.core.models import PayloadError, PlaybackStatus


STATUS_JSON = {
    "stopped": False,
    "paused": False,
    "buffering": False,
    "volume": 42,
    "volume_steps": 64,
    "shuffle_context": True,
    "track": {
        "uri": "spotify:track:t1",
        "name": "Song",
        "artist_names": ["A", "B"],
        "album_name": "Alb",
        "album_cover_url": "https://img.example/t1.jpg",
        "position": 1000,
        "duration": 200000,
    },
}


def test_decodes_full_status():
    status = PlaybackStatus.from_json(STATUS_JSON)

    assert status.volume == 42
    assert status.volume_steps == 64
    assert status.track is not None
    assert status.track.uri == "spotify:track:t1"
    assert status.track.artists == ("A", "B")
    assert status.track.artist == "A, B"
    assert status.track.album_art_url == "https://img.example/t1.jpg"
    assert status.track.position_ms == 1000
    assert status.track.duration_ms == 200000


def test_track_and_cover_are_optional():
    payload = dict(STATUS_JSON, track=None)
    assert PlaybackStatus.from_json(payload).track is None

    track = {k: v for k, v in STATUS_JSON["track"].items() if k != "album_cover_url"}
    status = PlaybackStatus.from_json(dict(STATUS_JSON, track=track))
    assert status.track is not None
    assert status.track.album_art_url is None


def test_empty_cover_url_counts_as_missing():
    track = dict(STATUS_JSON["track"], album_cover_url="")
    status = PlaybackStatus.from_json(dict(STATUS_JSON, track=track))
    assert status.track is not None
    assert status.track.album_art_url is None


@pytest.mark.parametrize(
    "payload",
    [
        [],
        "stopped",
        {k: v for k, v in STATUS_JSON.items() if k != "paused"},
        dict(STATUS_JSON, volume="loud"),
        dict(STATUS_JSON, volume=True),
        dict(STATUS_JSON, stopped="no"),
        dict(STATUS_JSON, track={"uri": "spotify:track:t1"}),
        dict(STATUS_JSON, track=dict(STATUS_JSON["track"], artist_names=[1, 2])),
    ],
)
def test_rejects_malformed_payloads(payload):
    with pytest.raises(PayloadError):
        PlaybackStatus.from_json(payload)


def test_whole_number_floats_are_accepted_as_integers():
    track = dict(STATUS_JSON["track"], position=1000.0, duration=200000.0)
    status = PlaybackStatus.from_json(dict(STATUS_JSON, volume=42.0, track=track))

    assert status.volume == 42
    assert status.track is not None
    assert status.track.position_ms == 1000
    assert isinstance(status.track.position_ms, int)


def test_fractional_floats_are_rejected_as_integers():
    track = dict(STATUS_JSON["track"], position=1000.5)
    with pytest.raises(PayloadError):
        PlaybackStatus.from_json(dict(STATUS_JSON, track=track))
