import json

import pytest
import requests

from helpers import run_now
from nowplaying_bridge.core.models import DaemonConfig, TransportCommand
from nowplaying_bridge.core.status_client import DaemonUnreachableError, StatusClient, StatusDecodeError


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, nesting=0):
        self.status_code = status_code
        self._body = body
        self._text = text
        self._nesting = nesting

    def json(self):
        if self._nesting:
            return json.loads("[" * self._nesting + "]" * self._nesting)
        if self._text is not None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self._text, 0)
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)


def make_client(session):
    return StatusClient(DaemonConfig("http://localhost:3678/", 3.0), session=session, dispatch=run_now)


def test_fetch_status_gets_status_with_timeout():
    session = FakeSession(FakeResponse(body={"stopped": True, "paused": False, "buffering": False, "volume": 0, "volume_steps": 64}))

    status = make_client(session).fetch_status()

    assert status.stopped
    assert session.calls == [("GET", "http://localhost:3678/status", {"timeout": 3.0})]


@pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_transport_errors_mean_unreachable(error):
    with pytest.raises(DaemonUnreachableError):
        make_client(FakeSession(error=error)).fetch_status()


def test_malformed_json_is_a_decode_error():
    with pytest.raises(StatusDecodeError):
        make_client(FakeSession(FakeResponse(text="<html>"))).fetch_status()


def test_wrong_shape_is_a_decode_error():
    with pytest.raises(StatusDecodeError):
        make_client(FakeSession(FakeResponse(body={"stopped": "yes"}))).fetch_status()


def test_http_error_status_is_a_decode_error():
    with pytest.raises(StatusDecodeError):
        make_client(FakeSession(FakeResponse(status_code=500, body={}))).fetch_status()


def test_transport_command_posts_without_body():
    session = FakeSession()

    make_client(session).send_transport_command(TransportCommand.NEXT)

    assert session.calls == [("POST", "http://localhost:3678/player/next", {"json": None, "timeout": 3.0})]


def test_seek_posts_position_in_ms():
    session = FakeSession()

    make_client(session).send_seek(61500)

    assert session.calls == [("POST", "http://localhost:3678/player/seek", {"json": {"position": 61500}, "timeout": 3.0})]


def test_command_failures_are_dropped():
    session = FakeSession(error=requests.ConnectionError("refused"))

    make_client(session).send_transport_command(TransportCommand.PAUSE)

    assert len(session.calls) == 1


def test_deeply_nested_json_is_a_decode_error():
    with pytest.raises(StatusDecodeError):
        make_client(FakeSession(FakeResponse(nesting=100_000))).fetch_status()
