"""Tests for the Overpass transport."""

from unittest.mock import MagicMock

import pytest
import requests

from geopoio.core import Config
from geopoio.core.exceptions import OverpassError, RequestCancelled
from geopoio.core.models import CancellationToken
from geopoio.overpass import OverpassClient


def make_response(chunks, status_code=200, text=""):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.iter_content.return_value = iter(chunks)
    return response


def make_client(response=None, error=None):
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return OverpassClient(Config(), session=session), session


@pytest.mark.asyncio
async def test_query_posts_payload_and_returns_elements():
    body = [b'{"version": 0.6, "elements": [', b'{"id": 1, "lat": 52.0, "lon": 13.0}]}']
    client, session = make_client(make_response(body))

    elements = await client.query("[out:json];")

    assert elements == [{"id": 1, "lat": 52.0, "lon": 13.0}]
    args, kwargs = session.post.call_args
    assert args[0] == "https://overpass-api.de/api/interpreter"
    assert kwargs["data"] == b"[out:json];"
    assert kwargs["headers"] == {"Content-Type": "text/plain"}
    assert kwargs["timeout"] == 180
    assert kwargs["stream"] is True


@pytest.mark.asyncio
async def test_body_without_elements_is_empty():
    client, _ = make_client(make_response([b'{"remark": "nothing"}']))
    assert await client.query("q") == []


@pytest.mark.asyncio
async def test_error_status_raises():
    client, _ = make_client(make_response([], status_code=429, text="rate limited"))
    with pytest.raises(OverpassError) as exc_info:
        await client.query("q")
    assert exc_info.value.status_code == 429
    assert "rate limited" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>busy</html>", b"[1, 2]", b'{"elements": {"a": 1}}'])
async def test_malformed_body_raises(body):
    client, _ = make_client(make_response([body]))
    with pytest.raises(OverpassError):
        await client.query("q")


@pytest.mark.asyncio
async def test_transport_failure_raises():
    client, _ = make_client(error=requests.ConnectionError("unreachable"))
    with pytest.raises(OverpassError, match="unreachable"):
        await client.query("q")


@pytest.mark.asyncio
async def test_cancelled_token_skips_request():
    client, session = make_client(make_response([b"{}"]))
    token = CancellationToken()
    token.cancel()

    with pytest.raises(RequestCancelled):
        await client.query("q", token)
    session.post.assert_not_called()


@pytest.mark.asyncio
async def test_cancellation_stops_reading_the_body():
    token = CancellationToken()

    def chunks():
        yield b'{"elements": ['
        token.cancel()
        yield b"]}"

    response = make_response([])
    response.iter_content.return_value = chunks()
    client, _ = make_client(response)

    with pytest.raises(RequestCancelled):
        await client.query("q", token)
    response.__exit__.assert_called_once()
