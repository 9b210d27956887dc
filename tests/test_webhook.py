"""
Tests for webhook forwarding with retries.
"""

import httpx
import pytest
import respx

from packslip.output_handler import WebhookForwarder
from packslip.output_handler.webhook import is_transient
from packslip.utils.exceptions import WebhookDeliveryError

HOOK_URL = "https://example.com/webhook"


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def forwarder(sleeps):
    return WebhookForwarder(url=HOOK_URL, retries=2, sleep=sleeps.append)


@respx.mock
def test_send_posts_json(forwarder):
    route = respx.post(HOOK_URL).mock(return_value=httpx.Response(200))

    result = forwarder.send({"id": "abc", "lineItems": []})

    assert result == {"delivered": True, "status_code": 200}
    assert route.call_count == 1
    assert route.calls[0].request.headers["content-type"] == "application/json"


@respx.mock
def test_server_errors_are_retried(forwarder, sleeps):
    route = respx.post(HOOK_URL).mock(side_effect=[httpx.Response(503), httpx.Response(200)])

    result = forwarder.send({"id": "abc"})

    assert result["delivered"] is True
    assert route.call_count == 2
    assert len(sleeps) == 1


@respx.mock
def test_timeouts_are_retried_until_budget_spent(forwarder, sleeps):
    route = respx.post(HOOK_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

    with pytest.raises(WebhookDeliveryError) as exc_info:
        forwarder.send({"id": "abc"})

    assert route.call_count == 3
    assert len(sleeps) == 2
    assert exc_info.value.details["url"] == HOOK_URL


@respx.mock
def test_client_errors_fail_immediately(forwarder, sleeps):
    route = respx.post(HOOK_URL).mock(return_value=httpx.Response(400))

    with pytest.raises(WebhookDeliveryError) as exc_info:
        forwarder.send({"id": "abc"})

    assert route.call_count == 1
    assert sleeps == []
    assert exc_info.value.details["status_code"] == 400


def test_missing_url_skips_delivery():
    forwarder = WebhookForwarder(url="")

    result = forwarder.send({"id": "abc"})

    assert result["skipped"] is True
    assert not forwarder.enabled


def test_url_read_from_environment(monkeypatch):
    monkeypatch.setenv("PACKSLIP_WEBHOOK_URL", HOOK_URL)

    assert WebhookForwarder().url == HOOK_URL


def test_is_transient():
    request = httpx.Request("POST", HOOK_URL)

    assert is_transient(httpx.ReadTimeout("slow", request=request))
    assert is_transient(httpx.HTTPStatusError("boom", request=request, response=httpx.Response(502, request=request)))
    assert not is_transient(httpx.HTTPStatusError("bad", request=request, response=httpx.Response(422, request=request)))
    assert not is_transient(ValueError("not http"))
