"""Single-attempt webhook delivery outcomes."""

from __future__ import annotations

import json

import httpx
import pytest

from app.services.webhooks import (
    NO_URL_ERROR,
    DeliveryOptions,
    WebhookPayload,
    WebhookTarget,
    deliver_webhook,
    verify_signature,
)

from conftest import WebhookRecorder


@pytest.fixture
def payload() -> WebhookPayload:
    return WebhookPayload(
        id="fb-1",
        app_id="demo_app",
        timestamp="2024-05-01T12:00:00Z",
        transcript="Love the new dashboard",
        summary="Dashboard praise",
        category="praise",
        sentiment="positive",
        priority="low",
        audio_url="/uploads/fb-1.webm",
    )


async def test_empty_url_fails_without_io(payload):
    recorder = WebhookRecorder()

    result = await deliver_webhook(payload, WebhookTarget(url=""), transport=recorder.transport)

    assert result.success is False
    assert result.error == NO_URL_ERROR
    assert recorder.requests == []


async def test_success_posts_json_with_user_agent(payload):
    recorder = WebhookRecorder(status_code=204, body="")

    result = await deliver_webhook(
        payload,
        WebhookTarget(url="https://example.com/hook"),
        transport=recorder.transport,
    )

    assert result.success is True
    assert result.error is None
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["user-agent"] == "EchoFeedback/1.0"
    assert "x-echo-signature" not in request.headers
    assert "x-echo-timestamp" not in request.headers
    assert json.loads(request.content) == payload.as_dict()


async def test_secret_adds_verifiable_signature_and_timestamp(payload):
    recorder = WebhookRecorder()

    await deliver_webhook(
        payload,
        WebhookTarget(url="https://hooks.slack.com/services/T/B/X", secret="s3cret"),
        transport=recorder.transport,
    )

    request = recorder.requests[0]
    assert verify_signature(request.content, request.headers["x-echo-signature"], "s3cret")
    assert request.headers["x-echo-timestamp"].isdigit()
    assert "blocks" in json.loads(request.content)


async def test_custom_header_names(payload):
    recorder = WebhookRecorder()
    options = DeliveryOptions(signature_header="X-Sig", timestamp_header="X-Ts")

    await deliver_webhook(
        payload,
        WebhookTarget(url="https://example.com/hook", secret="k"),
        options=options,
        transport=recorder.transport,
    )

    assert "x-sig" in recorder.requests[0].headers
    assert "x-ts" in recorder.requests[0].headers


async def test_non_2xx_reports_status_and_truncated_body(payload):
    recorder = WebhookRecorder(status_code=500, body="x" * 500)

    result = await deliver_webhook(
        payload,
        WebhookTarget(url="https://example.com/hook"),
        transport=recorder.transport,
    )

    assert result.success is False
    assert result.error == "HTTP 500: " + "x" * 200


async def test_transport_error_is_reported_not_raised(payload):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await deliver_webhook(
        payload,
        WebhookTarget(url="https://example.com/hook"),
        transport=httpx.MockTransport(refuse),
    )

    assert result.success is False
    assert result.error == "connection refused"


async def test_exception_without_message_reports_class_name(payload):
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("", request=request)

    result = await deliver_webhook(
        payload,
        WebhookTarget(url="https://example.com/hook"),
        transport=httpx.MockTransport(boom),
    )

    assert result == type(result)(success=False, error="ReadTimeout")
