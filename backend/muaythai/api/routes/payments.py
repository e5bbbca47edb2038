"""
Payment gateway callbacks.

  POST /payments/callback?source=&bookingId=   JSON body (ModernPay and friends)
  GET  /payments/chillpay/callback             browser redirect from ChillPay
  POST /payments/chillpay/webhook              signed background notification
  GET  /payments/paypal/callback               buyer return after PayPal approval

All of them end in the same reconciler; the GET variants answer with a
redirect, since their caller is the customer's browser.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.api.deps import public_base_url
from muaythai.core.config import Settings, get_settings
from muaythai.core.errors import BookingServiceError, ValidationError
from muaythai.core.logging import get_logger
from muaythai.db.session import get_db
from muaythai.models.booking import PaymentStatus
from muaythai.schemas.payment import PaymentCallbackResponse, WebhookAck
from muaythai.services.gateways.chillpay import CHILLPAY_PAYMENT_METHOD
from muaythai.services.gateways.paypal import PAYPAL_PAYMENT_METHOD, PayPalClient
from muaythai.services.payment_service import (
    reconcile_chillpay_notification,
    reconcile_chillpay_redirect,
    reconcile_payment,
    reconcile_paypal_return,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/callback", response_model=PaymentCallbackResponse)
async def payment_callback(
    request: Request,
    source: Optional[str] = Query(None),
    booking_id: Optional[str] = Query(None, alias="bookingId"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Gateway-to-server callback. Replays and late contradicting callbacks
    answer 200 with `applied: false` so the gateway stops retrying.
    """
    body = await request.body()
    try:
        payload = await request.json() if body else {}
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON body")

    result = await reconcile_payment(db, source, booking_id, payload, settings)
    return PaymentCallbackResponse(
        message=result.message,
        booking_id=result.booking_id,
        status=result.status.value,
        applied=result.applied,
    )


def _confirmation_url(
    base_url: str,
    booking_id: Optional[str],
    status: str,
    message: Optional[str],
    payment_method: str = CHILLPAY_PAYMENT_METHOD,
) -> str:
    params = {"paymentMethod": payment_method}
    if booking_id:
        params["bookingId"] = booking_id
    params["status"] = status
    if message:
        params["message"] = message
    return f"{base_url}/checkout/confirmation?{urlencode(params)}"


@router.get("/chillpay/callback")
async def chillpay_callback(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Persist the redirect's outcome, then send the browser to the confirmation page."""
    params = dict(request.query_params)
    base_url = public_base_url(request, settings)
    booking_id = params.get("bookingId") or params.get("OrderNo")

    try:
        result = await reconcile_chillpay_redirect(db, params, settings)
    except BookingServiceError as exc:
        logger.warning("chillpay_redirect_failed", booking_id=booking_id, error=exc.message)
        return RedirectResponse(_confirmation_url(base_url, booking_id, "error", exc.message), status_code=302)

    if result.status is PaymentStatus.COMPLETED:
        url = _confirmation_url(base_url, result.booking_id, "success", None)
    else:
        url = _confirmation_url(base_url, result.booking_id, "failed", result.outcome.message)
    return RedirectResponse(url, status_code=302)


@router.post("/chillpay/webhook", response_model=WebhookAck)
async def chillpay_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """ChillPay background notification (form-encoded, MD5-signed)."""
    form = await request.form()
    payload = {key: value for key, value in form.items() if isinstance(value, str)}
    result = await reconcile_chillpay_notification(db, payload, settings)
    return WebhookAck(message=result.message)


def get_paypal_client(settings: Settings = Depends(get_settings)) -> PayPalClient:
    return PayPalClient(settings)


@router.get("/paypal/callback")
async def paypal_callback(
    request: Request,
    token: Optional[str] = Query(None),
    payer_id: Optional[str] = Query(None, alias="PayerID"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    paypal: PayPalClient = Depends(get_paypal_client),
):
    """Capture the approved order, persist the result, then redirect to the confirmation page."""
    base_url = public_base_url(request, settings)

    try:
        result = await reconcile_paypal_return(db, token, paypal)
    except BookingServiceError as exc:
        logger.warning("paypal_return_failed", order_id=token, payer_id=payer_id, error=exc.message)
        url = _confirmation_url(base_url, None, "error", exc.message, PAYPAL_PAYMENT_METHOD)
        return RedirectResponse(url, status_code=302)

    if result.status is PaymentStatus.COMPLETED:
        url = _confirmation_url(base_url, result.booking_id, "success", None, PAYPAL_PAYMENT_METHOD)
    else:
        url = _confirmation_url(base_url, result.booking_id, "failed", result.outcome.message, PAYPAL_PAYMENT_METHOD)
    return RedirectResponse(url, status_code=302)
