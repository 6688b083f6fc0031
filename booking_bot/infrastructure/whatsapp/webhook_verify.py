from __future__ import annotations

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


def verify_subscription(
    mode: str | None,
    token: str | None,
    challenge: str | None,
    expected_token: str,
) -> str | None:
    """Return the challenge to echo back when the subscription handshake is valid."""
    if mode != "subscribe" or not expected_token or token != expected_token:
        logger.warning("Webhook verification failed", extra={"reason": f"mode={mode}"})
        return None
    logger.info("Webhook verified")
    return challenge or ""


def verify_signature(
    body: bytes,
    signature_header: str | None,
    app_secret: str | None,
    allow_unsigned: bool = False,
) -> bool:
    """Check the X-Hub-Signature-256 header Meta attaches to every POST."""
    if not signature_header:
        if allow_unsigned:
            logger.warning("Missing signature header; accepting in dev mode")
            return True
        return False

    if not app_secret:
        logger.error("Missing app secret for signature verification")
        return False

    if not signature_header.lower().startswith(SIGNATURE_PREFIX):
        return False

    received = signature_header[len(SIGNATURE_PREFIX):]
    expected = hmac.new(app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, received)
