"""Tests for approval callback delivery."""

import asyncio
import json

import httpx

from postgate.services.callbacks import CallbackDispatcher, build_approval_payload
from tests.helpers import RecordingTransport


def test_payload_shape():
    assert build_approval_payload(3, "Hello") == {"id": 3, "status": "APPROVED", "content": "Hello"}


def test_send_approval_delivers(callbacks, callback_transport):
    delivered = asyncio.run(callbacks.send_approval(3, "Hello", "https://cb.example/hook?run=1"))

    assert delivered is True
    request = callback_transport.requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/json"
    assert str(request.url) == "https://cb.example/hook?run=1"
    assert json.loads(request.content) == {"id": 3, "status": "APPROVED", "content": "Hello"}


def test_non_2xx_is_not_delivered(app_settings):
    transport = RecordingTransport(status_code=502)
    dispatcher = CallbackDispatcher(app_settings, transport=transport.transport)

    assert asyncio.run(dispatcher.send_approval(1, "x", "https://cb.example/x")) is False
    assert len(transport.requests) == 1


def test_transport_error_is_not_delivered(app_settings):
    transport = RecordingTransport(error=httpx.ConnectError("refused"))
    dispatcher = CallbackDispatcher(app_settings, transport=transport.transport)

    assert asyncio.run(dispatcher.send_approval(1, "x", "https://cb.example/x")) is False


def test_unparseable_url_is_not_delivered(callbacks, callback_transport):
    assert asyncio.run(callbacks.send_approval(1, "x", "http://[::1")) is False
    assert callback_transport.requests == []
