"""
Payment callback reconciler.

STATE MACHINE
=============

    PENDING --+--> COMPLETED
              |
              +--> FAILED

Both target states are terminal. Gateways may deliver the same result more
than once (redirect + webhook, gateway retries) and occasionally deliver
contradicting results, so the transition is a compare-and-swap:

    UPDATE bookings SET payment_status = :new, ...
    WHERE id = :booking_id AND payment_status = 'PENDING'

  - 1 row affected  -> this callback won; transition applied
  - 0 rows affected -> look at the row:
        missing                    -> NotFoundError
        already in the same state  -> duplicate, harmless no-op
        in the other terminal state -> conflict, logged and ignored

The gateway-specific part (what counts as success, which fields are
reported) lives behind PaymentGateway; this module is written once for all
gateways.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.config import Settings
from muaythai.core.errors import MissingBookingIdError, NotFoundError, PersistenceError
from muaythai.core.logging import bind_booking_context, get_logger
from muaythai.core.metrics import record_payment_callback
from muaythai.db.base import utcnow
from muaythai.models.booking import Booking, PaymentStatus
from muaythai.services.booking_service import find_booking_by_order_no
from muaythai.services.gateways import (
    ChillPayWebhookGateway,
    PaymentGateway,
    PaymentOutcome,
    PayPalClient,
    PayPalGateway,
    booking_reference,
    get_gateway,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    booking_id: str
    status: PaymentStatus
    applied: bool
    outcome: PaymentOutcome

    @property
    def message(self) -> str:
        if self.applied:
            verb = "completed" if self.status is PaymentStatus.COMPLETED else "failed"
            return f"Payment {verb} and booking updated"
        return f"Booking already {self.status.value}; callback ignored"


async def apply_outcome(
    db: AsyncSession,
    booking_id: str,
    outcome: PaymentOutcome,
    gateway_name: str,
) -> ReconcileResult:
    """Transition a PENDING booking to the outcome's terminal state, at most once."""
    bind_booking_context(booking_id=booking_id, gateway=gateway_name)
    values = {
        "payment_status": outcome.status.value,
        "updated_at": utcnow(),
        **outcome.payment_fields(),
    }

    try:
        update_result = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.payment_status == PaymentStatus.PENDING.value,
            )
            .values(**values)
        )

        if update_result.rowcount == 1:
            logger.info(
                "payment_status_updated",
                status=outcome.status.value,
                transaction_id=outcome.transaction_id,
            )
            record_payment_callback(gateway_name, outcome.status.value.lower())
            return ReconcileResult(booking_id, outcome.status, True, outcome)

        current = await db.execute(select(Booking.payment_status).where(Booking.id == booking_id))
        current_status = current.scalar_one_or_none()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("payment_reconcile_failed", error=str(exc))
        raise PersistenceError("Failed to process payment callback") from exc

    if current_status is None:
        logger.warning("payment_callback_unknown_booking")
        raise NotFoundError("Booking not found")

    current_status = PaymentStatus(current_status)
    if current_status is outcome.status:
        logger.info("payment_callback_duplicate", status=current_status.value)
        record_payment_callback(gateway_name, "duplicate")
    else:
        logger.warning(
            "payment_callback_conflict",
            current_status=current_status.value,
            reported_status=outcome.status.value,
            transaction_id=outcome.transaction_id,
        )
        record_payment_callback(gateway_name, "conflict")
    return ReconcileResult(booking_id, current_status, False, outcome)


async def reconcile_payment(
    db: AsyncSession,
    source: Optional[str],
    booking_id: Optional[str],
    payload: Mapping[str, Any],
    settings: Settings,
) -> ReconcileResult:
    """
    Apply a gateway callback that names its booking directly.

    Raises:
        MissingBookingIdError: no booking id supplied
        UnknownGatewaySourceError: `source` is not a registered gateway
        NotFoundError: the booking does not exist
    """
    logger.info("payment_callback_received", source=source, booking_id=booking_id)
    if not booking_id:
        raise MissingBookingIdError()

    gateway: PaymentGateway = get_gateway(source, settings)
    outcome = gateway.parse_callback(payload)
    return await apply_outcome(db, booking_id, outcome, gateway.name)


async def reconcile_chillpay_notification(
    db: AsyncSession,
    payload: Mapping[str, Any],
    settings: Settings,
) -> ReconcileResult:
    """Apply a signed ChillPay background notification, located by OrderNo."""
    gateway = ChillPayWebhookGateway(settings.CHILLPAY_MD5_SECRET)
    outcome = gateway.parse_callback(payload)

    order_no = payload.get("OrderNo")
    logger.info("payment_callback_received", source=gateway.name, order_no=order_no)
    if not order_no:
        raise MissingBookingIdError("Missing OrderNo")

    booking = await find_booking_by_order_no(db, str(order_no))
    if booking is None:
        logger.warning("chillpay_booking_not_found", order_no=order_no)
        raise NotFoundError("Booking not found")

    return await apply_outcome(db, booking.id, outcome, gateway.name)


async def reconcile_chillpay_redirect(
    db: AsyncSession,
    params: Mapping[str, Any],
    settings: Settings,
) -> ReconcileResult:
    """
    Apply the ChillPay customer redirect. The booking is named by our own
    `bookingId` parameter, or located through the gateway's OrderNo.
    """
    booking_id = params.get("bookingId")
    order_no = params.get("OrderNo")
    if not booking_id and order_no:
        booking = await find_booking_by_order_no(db, str(order_no))
        if booking is None:
            logger.warning("chillpay_booking_not_found", order_no=order_no)
            raise NotFoundError("Booking not found")
        booking_id = booking.id
    return await reconcile_payment(db, "chillpay", booking_id, params, settings)


async def reconcile_paypal_return(
    db: AsyncSession,
    order_id: Optional[str],
    paypal: PayPalClient,
) -> ReconcileResult:
    """
    Capture the approved PayPal order and apply the capture's result to
    the booking named in its reference_id.

    Raises:
        MissingBookingIdError: no order token, or no reference_id on the capture
        GatewayConfigurationError / GatewayRequestError: the capture call failed
    """
    logger.info("payment_callback_received", source=PayPalGateway.name, order_id=order_id)
    if not order_id:
        raise MissingBookingIdError("Missing payment information")

    capture = await paypal.capture_order(order_id)
    gateway = PayPalGateway()
    outcome = gateway.parse_callback(capture)

    booking_id = booking_reference(capture)
    if not booking_id:
        logger.error("paypal_reference_missing", order_id=order_id, capture_status=capture.get("status"))
        raise MissingBookingIdError("Could not find booking ID in PayPal response")

    return await apply_outcome(db, booking_id, outcome, gateway.name)
