"""
Payment service.

Owns every payment status change: gateway outcomes (verification and
webhooks) and the admin confirm / reject / refund actions. Each change
updates the payment, the application's mirrored payment status and,
where the lifecycle requires it, the allocation, in one transaction.
"""

import json
import secrets
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import (
    ConflictError,
    NotFoundError,
    PaymentGatewayError,
    ValidationError,
)
from hostel_allocation.core.security import verify_webhook_signature
from hostel_allocation.models.application import Application
from hostel_allocation.models.base import (
    AllocationStatus,
    ApplicationStatus,
    PaymentStatus,
    RefundStatus,
    utcnow,
)
from hostel_allocation.models.payment import Payment, Refund
from hostel_allocation.repositories.allocation import AllocationRepository
from hostel_allocation.repositories.application import ApplicationRepository
from hostel_allocation.repositories.payment import PaymentRepository, RefundRepository
from hostel_allocation.repositories.system import SettingRepository
from hostel_allocation.repositories.user import UserRepository
from hostel_allocation.schemas.payment import PaymentInitializeResponse, WebhookAck
from hostel_allocation.services.base import BaseService, ServiceResult
from hostel_allocation.services.lifecycle import ALLOCATION_TRANSITIONS, PAYMENT_TRANSITIONS
from hostel_allocation.services.payment.payment_gateway import (
    FAILED,
    SUCCESS,
    GatewayVerification,
    PaystackGateway,
)
from hostel_allocation.services.settings import PAYMENT_WINDOW, TimeWindowService, load_payment_amount

CHARGE_SUCCESS = "charge.success"
CHARGE_FAILED = "charge.failed"


def generate_reference(now: Optional[datetime] = None, prefix: str = "HAS") -> str:
    now = now or utcnow()
    return f"{prefix}-{int(now.timestamp() * 1000)}-{secrets.token_hex(5).upper()}"


class PaymentService(BaseService):

    def __init__(self, db_session: Session, gateway: PaystackGateway, webhook_secret: str = ""):
        super().__init__(db_session)
        self.gateway = gateway
        self.webhook_secret = webhook_secret
        self.payments = PaymentRepository(db_session)
        self.refunds = RefundRepository(db_session)
        self.applications = ApplicationRepository(db_session)
        self.allocations = AllocationRepository(db_session)
        self.users = UserRepository(db_session)
        self.settings = SettingRepository(db_session)
        self.windows = TimeWindowService(db_session)

    # -------------------------------------------------------------------------
    # Student flow
    # -------------------------------------------------------------------------

    def initialize_payment(
        self,
        user_id: str,
        application_id: str,
        now: Optional[datetime] = None,
    ) -> ServiceResult[PaymentInitializeResponse]:
        """
        Create a PENDING payment and start a gateway checkout for it.

        Requires the payment window to be open and an approved application
        of the caller without a completed payment.
        """
        now = now or utcnow()
        try:
            self.windows.require_open(PAYMENT_WINDOW, now)

            with self.transaction():
                user = self.users.get_by_id(user_id)
                application = self.applications.get_by_id(application_id, for_update=True)
                if application.user_id != user.id:
                    raise NotFoundError("Application", application_id)
                if application.application_status != ApplicationStatus.APPROVED:
                    raise ValidationError(
                        "Only approved applications can be paid for",
                        field_errors={"application_id": [application.application_status.value]},
                    )
                if self.payments.has_completed_payment(application.id):
                    raise ConflictError("This application has already been paid for", {"application_id": application.id})

                payment = self.payments.create(
                    Payment(
                        application_id=application.id,
                        user_id=user.id,
                        reference=generate_reference(now),
                        amount=load_payment_amount(self.settings),
                        currency=self.gateway.currency,
                        status=PaymentStatus.PENDING,
                    )
                )
                if application.payment_status == PaymentStatus.FAILED:
                    self.applications.update(application, {"payment_status": PaymentStatus.PENDING})

            try:
                checkout = self.gateway.initialize(
                    email=user.email,
                    amount=payment.amount,
                    reference=payment.reference,
                    metadata={
                        "userId": user.id,
                        "applicationId": application.id,
                        "studentName": user.name,
                        "matricNo": user.matric_no,
                    },
                )
            except PaymentGatewayError as e:
                with self.transaction():
                    self._mark_failed(payment, e.message)
                raise

            self._logger.info(
                "Payment initialized",
                extra={"payment_id": payment.id, "reference": payment.reference, "demo_mode": checkout.demo},
            )
            return ServiceResult.success(
                PaymentInitializeResponse(
                    payment_id=payment.id,
                    reference=payment.reference,
                    authorization_url=checkout.authorization_url,
                    amount=payment.amount,
                    currency=payment.currency,
                    demo_mode=checkout.demo,
                ),
                message="Payment initialized",
            )
        except Exception as e:
            return self._handle_exception(e, "initialize payment", application_id)

    def verify_payment(self, reference: str, user_id: Optional[str] = None) -> ServiceResult[Payment]:
        """Pull the gateway outcome of ``reference`` and apply it."""
        try:
            payment = self.payments.find_by_reference(reference)
            if payment is None or (user_id is not None and payment.user_id != user_id):
                raise NotFoundError("Payment", reference)
            if payment.status != PaymentStatus.PENDING:
                return ServiceResult.success(payment, message=f"Payment already {payment.status.value.lower()}")

            outcome = self.gateway.verify(reference)

            with self.transaction():
                payment = self.payments.find_by_reference(reference, for_update=True)
                self._apply_outcome(payment, outcome)

            return ServiceResult.success(payment, message=f"Payment {payment.status.value.lower()}")
        except Exception as e:
            return self._handle_exception(e, "verify payment", reference)

    # -------------------------------------------------------------------------
    # Gateway webhook
    # -------------------------------------------------------------------------

    def handle_webhook(self, raw_body: bytes, signature: Optional[str]) -> ServiceResult[WebhookAck]:
        """
        Apply a signed ``charge.success`` / ``charge.failed`` event.

        The signature is checked before anything is parsed; a bad one
        rejects the whole request. Unknown references and other event
        types are acknowledged without changes.
        """
        try:
            verify_webhook_signature(self.webhook_secret, raw_body, signature)

            try:
                event = json.loads(raw_body)
            except ValueError as e:
                raise ValidationError("Webhook body is not valid JSON") from e

            event_type = event.get("event")
            data = event.get("data") or {}
            reference = data.get("reference")

            if event_type not in (CHARGE_SUCCESS, CHARGE_FAILED):
                self._logger.info("Ignoring webhook event", extra={"event_type": event_type})
                return ServiceResult.success(WebhookAck(processed=False))
            if not reference:
                raise ValidationError("Webhook event carries no reference")

            with self.transaction():
                payment = self.payments.find_by_reference(reference, for_update=True)
                if payment is None:
                    self._logger.warning("Webhook for unknown payment reference", extra={"reference": reference})
                    return ServiceResult.success(WebhookAck(processed=False))

                # The event type decides the outcome; the transaction status is informational
                outcome = replace(
                    PaystackGateway.parse_transaction(data, reference),
                    status=SUCCESS if event_type == CHARGE_SUCCESS else FAILED,
                )
                changed = self._apply_outcome(payment, outcome)

            self._logger.info(
                "Webhook processed",
                extra={"event_type": event_type, "reference": reference, "changed": changed},
            )
            return ServiceResult.success(WebhookAck(processed=changed))
        except Exception as e:
            return self._handle_exception(e, "process payment webhook")

    # -------------------------------------------------------------------------
    # Admin actions
    # -------------------------------------------------------------------------

    def confirm_payment(
        self,
        payment_id: str,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[Payment]:
        """Manually mark a pending payment completed and confirm its allocation."""
        now = now or utcnow()
        try:
            with self.transaction():
                payment = self.payments.get_by_id(payment_id, for_update=True)
                self._mark_completed(payment, paid_at=now, gateway_response=f"Confirmed by admin {actor_id or ''}".strip())

                allocation = self.allocations.find_current_for_application(payment.application_id)
                if allocation is not None and allocation.status == AllocationStatus.ALLOCATED:
                    self.allocations.update(
                        allocation,
                        {"status": AllocationStatus.CONFIRMED, "confirmed_at": now},
                    )

            self._logger.info(
                "Payment confirmed",
                extra={
                    "payment_id": payment.id,
                    "allocation_id": allocation.id if allocation is not None else None,
                    "actor": actor_id,
                },
            )
            return ServiceResult.success(payment, message="Payment confirmed successfully")
        except Exception as e:
            return self._handle_exception(e, "confirm payment", payment_id)

    def reject_payment(self, payment_id: str, reason: str, actor_id: Optional[str] = None) -> ServiceResult[Payment]:
        try:
            reason = self._require_reason(reason)
            with self.transaction():
                payment = self.payments.get_by_id(payment_id, for_update=True)
                self._mark_failed(payment, reason)

            self._logger.info("Payment rejected", extra={"payment_id": payment.id, "actor": actor_id})
            return ServiceResult.success(payment, message="Payment rejected successfully")
        except Exception as e:
            return self._handle_exception(e, "reject payment", payment_id)

    def refund_payment(
        self,
        payment_id: str,
        reason: str,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[Payment]:
        """
        Refund a completed payment.

        In one transaction: payment -> REFUNDED, the application's active
        allocation -> PENDING (freeing its bed), application payment
        status -> REFUNDED, and a PENDING refund record.
        """
        now = now or utcnow()
        try:
            reason = self._require_reason(reason)
            with self.transaction():
                payment = self.payments.get_by_id(payment_id, for_update=True)
                PAYMENT_TRANSITIONS.ensure(payment.status, PaymentStatus.REFUNDED)

                self.payments.update(
                    payment,
                    {
                        "status": PaymentStatus.REFUNDED,
                        "refunded_at": now,
                        "refunded_by": actor_id,
                        "refund_reason": reason,
                    },
                )

                allocation = self.allocations.find_current_for_application(payment.application_id)
                if allocation is not None and allocation.is_active:
                    ALLOCATION_TRANSITIONS.ensure(allocation.status, AllocationStatus.PENDING)
                    self.allocations.update(
                        allocation,
                        {"status": AllocationStatus.PENDING, "confirmed_at": None},
                    )

                application = self.applications.get_by_id(payment.application_id)
                self.applications.update(application, {"payment_status": PaymentStatus.REFUNDED})

                refund = self.refunds.create(
                    Refund(
                        payment_id=payment.id,
                        amount=payment.amount,
                        reason=reason,
                        status=RefundStatus.PENDING,
                        requested_by=actor_id,
                        requested_at=now,
                    )
                )

            self._logger.info(
                "Payment refunded",
                extra={
                    "payment_id": payment.id,
                    "refund_id": refund.id,
                    "allocation_id": allocation.id if allocation is not None else None,
                    "actor": actor_id,
                },
            )
            return ServiceResult.success(payment, message="Payment refunded successfully")
        except Exception as e:
            return self._handle_exception(e, "refund payment", payment_id)

    def list_payments(self, status: Optional[PaymentStatus] = None) -> ServiceResult[List[Payment]]:
        try:
            return ServiceResult.success(self.payments.list_with_details(status))
        except Exception as e:
            return self._handle_exception(e, "list payments")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_reason(reason: Optional[str]) -> str:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required", field_errors={"reason": ["required"]})
        return reason

    def _apply_outcome(self, payment: Payment, outcome: GatewayVerification) -> bool:
        """Apply a gateway outcome; returns whether anything changed."""
        if outcome.succeeded:
            if payment.status == PaymentStatus.COMPLETED:
                self._logger.info("Payment already completed", extra={"reference": payment.reference})
                return False
            if payment.status != PaymentStatus.PENDING:
                self._logger.warning(
                    "Ignoring gateway success for settled payment",
                    extra={"reference": payment.reference, "status": payment.status.value},
                )
                return False
            self._mark_completed(
                payment,
                paid_at=outcome.paid_at or utcnow(),
                transaction_id=outcome.transaction_id,
                gateway_response=outcome.gateway_response,
            )
            return True

        if outcome.failed:
            if payment.status != PaymentStatus.PENDING:
                self._logger.info(
                    "Ignoring gateway failure for settled payment",
                    extra={"reference": payment.reference, "status": payment.status.value},
                )
                return False
            self._mark_failed(payment, outcome.gateway_response or "Payment failed at gateway")
            return True

        return False

    def _mark_completed(
        self,
        payment: Payment,
        paid_at: datetime,
        transaction_id: Optional[str] = None,
        gateway_response: Optional[str] = None,
    ) -> None:
        PAYMENT_TRANSITIONS.ensure(payment.status, PaymentStatus.COMPLETED)
        data = {"status": PaymentStatus.COMPLETED, "paid_at": paid_at}
        if transaction_id:
            data["transaction_id"] = transaction_id
        if gateway_response:
            data["gateway_response"] = gateway_response
        self.payments.update(payment, data)

        application: Application = self.applications.get_by_id(payment.application_id)
        self.applications.update(application, {"payment_status": PaymentStatus.COMPLETED})

    def _mark_failed(self, payment: Payment, reason: str) -> None:
        PAYMENT_TRANSITIONS.ensure(payment.status, PaymentStatus.FAILED)
        self.payments.update(payment, {"status": PaymentStatus.FAILED, "failure_reason": reason[:500]})

        application: Application = self.applications.get_by_id(payment.application_id)
        if application.payment_status == PaymentStatus.PENDING:
            self.applications.update(application, {"payment_status": PaymentStatus.FAILED})
