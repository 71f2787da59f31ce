"""HMAC-SHA256 signatures for outbound webhook bodies."""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def _as_bytes(value: bytes | str) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def generate_signature(payload: bytes | str, secret: str) -> str:
    """Return the hex HMAC-SHA256 digest of ``payload`` keyed by ``secret``."""

    return hmac.new(_as_bytes(secret), _as_bytes(payload), hashlib.sha256).hexdigest()


def signature_header(payload: bytes | str, secret: str) -> str:
    """Value sent in the signature header: ``sha256=<hex>``."""

    return f"{SIGNATURE_PREFIX}{generate_signature(payload, secret)}"


def verify_signature(payload: bytes | str, signature: str | None, secret: str) -> bool:
    """Check a received signature header against the expected one."""

    if not signature:
        return False
    expected = signature_header(payload, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


__all__ = ["SIGNATURE_PREFIX", "generate_signature", "signature_header", "verify_signature"]
