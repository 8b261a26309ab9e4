"""Inbound payment gateway webhooks."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from starlette.concurrency import run_in_threadpool

from hostel_allocation.api.deps import get_payment_service, unwrap_result
from hostel_allocation.core.security import SIGNATURE_HEADER
from hostel_allocation.schemas.payment import WebhookAck
from hostel_allocation.services.payment import PaymentService

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/paystack", response_model=WebhookAck)
async def paystack_webhook(
    request: Request,
    signature: Optional[str] = Header(None, alias=SIGNATURE_HEADER),
    service: PaymentService = Depends(get_payment_service),
):
    # The signature covers the exact bytes sent, so the body is read raw
    raw_body = await request.body()
    result = await run_in_threadpool(service.handle_webhook, raw_body, signature)
    return unwrap_result(result)
