import hashlib
import hmac

import pytest

from hostel_allocation.core.exceptions import SignatureError
from hostel_allocation.core.security import compute_signature, verify_webhook_signature

SECRET = "sk_test_secret"
BODY = b'{"event":"charge.success","data":{"reference":"HAS-1"}}'


def test_compute_signature_is_hmac_sha512_hex():
    expected = hmac.new(SECRET.encode(), BODY, hashlib.sha512).hexdigest()
    assert compute_signature(SECRET, BODY) == expected
    assert compute_signature(SECRET, BODY.decode()) == expected


def test_valid_signature_passes():
    verify_webhook_signature(SECRET, BODY, compute_signature(SECRET, BODY))


@pytest.mark.parametrize(
    "signature, message",
    [
        (None, "No signature provided"),
        ("", "No signature provided"),
        ("deadbeef", "Invalid signature"),
    ],
)
def test_bad_signatures_are_rejected(signature, message):
    with pytest.raises(SignatureError, match=message):
        verify_webhook_signature(SECRET, BODY, signature)


def test_signature_over_modified_body_is_rejected():
    signature = compute_signature(SECRET, BODY)
    with pytest.raises(SignatureError):
        verify_webhook_signature(SECRET, BODY + b" ", signature)


def test_missing_secret_rejects_everything():
    with pytest.raises(SignatureError):
        verify_webhook_signature("", BODY, compute_signature("x", BODY))
