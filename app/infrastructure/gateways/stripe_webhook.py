import json
from typing import Any

import stripe

from app.domain.errors import WebhookSignatureError

# Seconds a signed timestamp stays valid.
SIGNATURE_TOLERANCE = 300


def verify_webhook_payload(
    payload: bytes,
    signature_header: str | None,
    webhook_secret: str | None,
) -> dict[str, Any]:
    """Checks the ``Stripe-Signature`` header and returns the decoded event."""
    if not webhook_secret:
        raise WebhookSignatureError("Webhook secret not configured")
    if not signature_header:
        raise WebhookSignatureError("Missing stripe-signature header")
    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise WebhookSignatureError("Invalid webhook payload") from exc

    try:
        stripe.WebhookSignature.verify_header(
            body, signature_header, webhook_secret, tolerance=SIGNATURE_TOLERANCE
        )
    except stripe.SignatureVerificationError as exc:
        raise WebhookSignatureError("Invalid signature") from exc

    try:
        event = json.loads(body)
    except json.JSONDecodeError as exc:
        raise WebhookSignatureError("Invalid webhook payload") from exc
    if not isinstance(event, dict):
        raise WebhookSignatureError("Invalid webhook payload")
    return event
