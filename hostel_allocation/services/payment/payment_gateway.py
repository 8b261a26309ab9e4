"""
Paystack gateway client.

Thin synchronous wrapper over the Paystack transaction API using httpx.
When no real secret key is configured the client runs in demo mode and
never leaves the process: initialisation returns a link to the
frontend's demo checkout and verification reports success.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from dateutil.parser import isoparse

from hostel_allocation.config.settings import Settings
from hostel_allocation.core.exceptions import PaymentGatewayError
from hostel_allocation.core.logging import get_logger

logger = get_logger(__name__)

SUCCESS = "success"
FAILED = "failed"
ABANDONED = "abandoned"


def to_minor_units(amount: Decimal) -> int:
    """Naira to kobo."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_real_secret_key(secret_key: Optional[str]) -> bool:
    key = secret_key or ""
    return key.startswith(("sk_test_", "sk_live_")) and "your-paystack" not in key and len(key) > 20


@dataclass(frozen=True)
class GatewayCheckout:
    authorization_url: str
    reference: str
    access_code: Optional[str] = None
    demo: bool = False


@dataclass(frozen=True)
class GatewayVerification:
    reference: str
    status: str
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    gateway_response: Optional[str] = None
    amount_minor: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS

    @property
    def failed(self) -> bool:
        return self.status in (FAILED, ABANDONED)


class PaystackGateway:

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        frontend_url: str = "http://localhost:5173",
        currency: str = "NGN",
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.secret_key = secret_key or ""
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {self.secret_key}"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "PaystackGateway":
        return cls(
            secret_key=settings.PAYSTACK_SECRET_KEY,
            base_url=settings.PAYSTACK_BASE_URL,
            frontend_url=settings.FRONTEND_URL,
            currency=settings.PAYMENT_CURRENCY,
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
            transport=transport,
        )

    @property
    def demo_mode(self) -> bool:
        return not is_real_secret_key(self.secret_key)

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------------

    def initialize(
        self,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: Optional[Dict[str, Any]] = None,
        callback_url: Optional[str] = None,
    ) -> GatewayCheckout:
        """
        Start a checkout and return the URL the student is sent to.

        Raises:
            PaymentGatewayError: the gateway refused or could not be reached
        """
        if self.demo_mode:
            logger.warning("Paystack not configured, using demo checkout", extra={"reference": reference})
            return self._demo_checkout(reference, amount)

        payload = {
            "email": email,
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "reference": reference,
            "metadata": metadata or {},
            "callback_url": callback_url or f"{self.frontend_url}/dashboard/payments/verify",
        }
        data = self._request("POST", "/transaction/initialize", json=payload)
        authorization_url = data.get("authorization_url")
        if not authorization_url:
            raise PaymentGatewayError(
                "Payment gateway returned no authorization URL",
                details={"reference": reference},
            )
        return GatewayCheckout(
            authorization_url=authorization_url,
            access_code=data.get("access_code"),
            reference=data.get("reference", reference),
        )

    def verify(self, reference: str) -> GatewayVerification:
        """
        Ask the gateway for the outcome of ``reference``.

        Raises:
            PaymentGatewayError: the gateway refused or could not be reached
        """
        if self.demo_mode:
            return GatewayVerification(
                reference=reference,
                status=SUCCESS,
                paid_at=datetime.now(timezone.utc),
                transaction_id=f"DEMO-{reference}",
                gateway_response="Demo payment",
            )

        data = self._request("GET", f"/transaction/verify/{reference}")
        return self.parse_transaction(data, reference)

    @staticmethod
    def parse_transaction(data: Dict[str, Any], reference: Optional[str] = None) -> GatewayVerification:
        """Build a verification from a transaction object (verify response or webhook ``data``)."""
        paid_at = None
        if data.get("paid_at") or data.get("paidAt"):
            try:
                paid_at = isoparse(data.get("paid_at") or data.get("paidAt"))
                if paid_at.tzinfo is None:
                    paid_at = paid_at.replace(tzinfo=timezone.utc)
            except (TypeError, ValueError):
                paid_at = None
        transaction_id = data.get("id")
        return GatewayVerification(
            reference=data.get("reference") or reference or "",
            status=str(data.get("status") or "").lower(),
            paid_at=paid_at,
            transaction_id=str(transaction_id) if transaction_id is not None else None,
            gateway_response=data.get("gateway_response"),
            amount_minor=data.get("amount"),
            raw=data,
        )

    # -------------------------------------------------------------------------

    def _demo_checkout(self, reference: str, amount: Decimal) -> GatewayCheckout:
        query = urlencode({"reference": reference, "amount": str(amount)})
        return GatewayCheckout(
            authorization_url=f"{self.frontend_url}/dashboard/payments/demo?{query}",
            access_code="DEMO_ACCESS_CODE",
            reference=reference,
            demo=True,
        )

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Paystack request failed: {e}", extra={"path": path})
            raise PaymentGatewayError("Unable to reach payment gateway", details={"path": path}) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not body.get("status"):
            logger.error(
                "Paystack rejected request",
                extra={"path": path, "status_code": response.status_code, "gateway_message": body.get("message")},
            )
            raise PaymentGatewayError(
                body.get("message") or "Payment gateway request failed",
                details={"path": path, "status_code": response.status_code},
            )
        return body.get("data") or {}
