"""
Webhook signature verification.

Paystack signs the raw request body with HMAC-SHA512 keyed by the
account's secret key and sends the hex digest in ``x-paystack-signature``.
"""

import hashlib
import hmac
from typing import Optional, Union

from hostel_allocation.core.exceptions import SignatureError

SIGNATURE_HEADER = "x-paystack-signature"


def compute_signature(secret: str, body: Union[bytes, str]) -> str:
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


def verify_webhook_signature(secret: str, body: Union[bytes, str], signature: Optional[str]) -> None:
    """
    Check ``signature`` against the body using a constant-time comparison.

    Raises:
        SignatureError: no secret configured, no signature sent, or mismatch
    """
    if not secret:
        raise SignatureError("Webhook secret is not configured")
    if not signature:
        raise SignatureError("No signature provided")
    expected = compute_signature(secret, body)
    if not hmac.compare_digest(expected, signature.strip().lower()):
        raise SignatureError("Invalid signature")
