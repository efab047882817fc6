"""
Tests for the Green API client and phone number handling.
"""
import json

import httpx
import pytest

from greenwaste.core.exceptions import UpstreamError
from greenwaste.services.whatsapp_service import (
    GreenApiClient, format_phone_number, is_valid_phone, to_chat_id
)


@pytest.mark.parametrize("phone,expected", [
    ("054-1234567", "972541234567@c.us"),
    ("0541234567", "972541234567@c.us"),
    ("+972 54 123 4567", "972541234567@c.us"),
    ("541234567", "972541234567@c.us"),
])
def test_format_phone_number(phone, expected):
    assert format_phone_number(phone) == expected


def test_is_valid_phone():
    assert is_valid_phone("054-1234567")
    assert not is_valid_phone("123")


def test_to_chat_id_keeps_group_ids():
    assert to_chat_id("12036302@g.us") == "12036302@g.us"


def _client(handler):
    return GreenApiClient(
        base_url="https://api.example.test",
        instance_id="1101",
        access_token="secret",
        transport=httpx.MockTransport(handler)
    )


def test_send_message_posts_to_instance_endpoint():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"idMessage": "BAE5F4886F6F2D05"})

    message_id = _client(handler).send_message("054-1234567", "שלום")

    assert message_id == "BAE5F4886F6F2D05"
    assert captured["url"] == "https://api.example.test/waInstance1101/sendMessage/secret"
    assert captured["body"] == {"chatId": "972541234567@c.us", "message": "שלום"}


def test_send_file_by_url_includes_caption():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"idMessage": "ABC"})

    _client(handler).send_file_by_url("0541234567", "https://img.test/a.jpg", "a.jpg", caption="דוח")

    assert captured["body"]["urlFile"] == "https://img.test/a.jpg"
    assert captured["body"]["caption"] == "דוח"


def test_http_error_becomes_upstream_error():
    client = _client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(UpstreamError):
        client.send_message("0541234567", "x")


def test_missing_message_id_is_upstream_error():
    client = _client(lambda request: httpx.Response(200, json={}))
    with pytest.raises(UpstreamError):
        client.send_message("0541234567", "x")


def test_unconfigured_client_raises():
    client = GreenApiClient(base_url="https://api.example.test", instance_id="", access_token="")
    assert not client.is_configured()
    with pytest.raises(UpstreamError):
        client.send_message("0541234567", "x")


def test_is_instance_ready():
    ready = _client(lambda request: httpx.Response(200, json={"stateInstance": "authorized"}))
    broken = _client(lambda request: httpx.Response(502))
    assert ready.is_instance_ready()
    assert not broken.is_instance_ready()
