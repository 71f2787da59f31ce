"""HMAC signing helpers for outbound webhooks."""

from __future__ import annotations

import hashlib
import hmac

from app.services.webhooks.signing import (
    generate_signature,
    signature_header,
    verify_signature,
)


def test_generate_signature_matches_hmac_sha256():
    body = '{"id":"abc"}'
    expected = hmac.new(b"s3cret", body.encode("utf-8"), hashlib.sha256).hexdigest()

    assert generate_signature(body, "s3cret") == expected
    assert generate_signature(body.encode("utf-8"), "s3cret") == expected


def test_signature_header_is_prefixed_hex():
    value = signature_header("payload", "key")

    assert value.startswith("sha256=")
    assert len(value) == len("sha256=") + 64


def test_verify_signature_accepts_matching_header():
    header = signature_header("payload", "key")

    assert verify_signature("payload", header, "key") is True


def test_verify_signature_rejects_tampering():
    header = signature_header("payload", "key")

    assert verify_signature("payload!", header, "key") is False
    assert verify_signature("payload", header, "other-key") is False
    assert verify_signature("payload", header.replace("sha256=", "sha1="), "key") is False


def test_verify_signature_handles_missing_and_non_ascii_headers():
    assert verify_signature("payload", None, "key") is False
    assert verify_signature("payload", "", "key") is False
    assert verify_signature("payload", "sha256=é", "key") is False
