"""Tests for app registration and the test-webhook endpoint."""

from __future__ import annotations

import json


def test_create_app_hides_secret(client):
    response = client.post(
        "/api/apps",
        json={
            "app_id": "demo_app",
            "name": "Demo Application",
            "webhook_url": "https://example.com/hook",
            "webhook_secret": "s3cret",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["app_id"] == "demo_app"
    assert body["has_webhook"] is True
    assert "webhook_secret" not in body
    assert "created_at" in body

    fetched = client.get("/api/apps/demo_app").json()
    assert fetched == body


def test_upsert_keeps_created_at(client):
    created = client.post("/api/apps", json={"app_id": "demo_app", "name": "Demo"}).json()
    updated = client.post(
        "/api/apps",
        json={"app_id": "demo_app", "name": "Renamed", "webhook_url": "https://example.com/hook"},
    ).json()

    assert updated["name"] == "Renamed"
    assert updated["has_webhook"] is True
    assert updated["created_at"] == created["created_at"]


def test_missing_fields_are_a_400(client):
    response = client.post("/api/apps", json={"app_id": "demo_app"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: app_id, name"}


def test_invalid_webhook_url_persists_nothing(client):
    response = client.post(
        "/api/apps",
        json={"app_id": "demo_app", "name": "Demo", "webhook_url": "not-a-url"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid webhook URL format"}
    assert client.get("/api/apps/demo_app").status_code == 404


def test_unknown_app_is_a_404(client):
    response = client.get("/api/apps/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "App not found"}


def test_test_webhook_for_unknown_app(client):
    assert client.post("/api/apps/missing/test-webhook").status_code == 404


def test_test_webhook_without_url_sends_nothing(client, webhook_recorder):
    client.post("/api/apps", json={"app_id": "demo_app", "name": "Demo"})

    response = client.post("/api/apps/demo_app/test-webhook")

    assert response.status_code == 400
    assert response.json() == {"error": "No webhook configured for this app"}
    assert webhook_recorder.requests == []


def test_test_webhook_success(client, webhook_recorder):
    client.post(
        "/api/apps",
        json={"app_id": "demo_app", "name": "Demo", "webhook_url": "https://example.com/hook"},
    )

    response = client.post("/api/apps/demo_app/test-webhook")

    assert response.json() == {
        "success": True,
        "error": None,
        "message": "Test webhook sent successfully",
    }
    sent = json.loads(webhook_recorder.requests[0].content)
    assert sent["summary"] == "Test webhook delivery"
    assert sent["appId"] == "demo_app"


def test_test_webhook_failure(client, webhook_recorder):
    webhook_recorder.status_code = 404
    webhook_recorder.body = "no such hook"
    client.post(
        "/api/apps",
        json={"app_id": "demo_app", "name": "Demo", "webhook_url": "https://example.com/hook"},
    )

    response = client.post("/api/apps/demo_app/test-webhook")

    assert response.json() == {
        "success": False,
        "error": "HTTP 404: no such hook",
        "message": "Test webhook failed",
    }
