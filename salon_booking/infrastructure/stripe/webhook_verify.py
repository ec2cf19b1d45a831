from __future__ import annotations

import hashlib
import hmac
import logging
import time


logger = logging.getLogger(__name__)


def parse_signature_header(header: str | None) -> dict[str, list[str]]:
    """`t=123,v1=abc,v1=def` -> {"t": ["123"], "v1": ["abc", "def"]}"""
    entries: dict[str, list[str]] = {}
    for part in (header or "").split(","):
        key, sep, value = part.strip().partition("=")
        if not sep or not key or not value:
            continue
        entries.setdefault(key, []).append(value)
    return entries


def compute_signature(payload: bytes, timestamp: str, secret: str) -> str:
    signed_payload = timestamp.encode("utf-8") + b"." + payload
    return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()


def verify_stripe_signature(
    payload: bytes,
    signature_header: str | None,
    webhook_secret: str | None,
    tolerance_seconds: int | None = 300,
    now: float | None = None,
) -> bool:
    if not signature_header:
        logger.warning("Missing Stripe-Signature header")
        return False

    if not webhook_secret:
        logger.error("Missing webhook secret for signature verification")
        return False

    parsed = parse_signature_header(signature_header)
    timestamps = parsed.get("t") or []
    candidates = parsed.get("v1") or []
    if not timestamps or not candidates:
        return False

    timestamp = timestamps[0]
    if tolerance_seconds:
        try:
            age = (now if now is not None else time.time()) - int(timestamp)
        except ValueError:
            return False
        if age > tolerance_seconds:
            logger.warning("Stripe signature timestamp outside tolerance", extra={"reason": f"age={int(age)}s"})
            return False

    expected = compute_signature(payload, timestamp, webhook_secret)
    return any(hmac.compare_digest(expected, candidate) for candidate in candidates)
