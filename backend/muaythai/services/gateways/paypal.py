"""
PayPal return handling.

After approving an order PayPal sends the buyer back with
`?token=<order id>&PayerID=...`. Nothing in that redirect is trusted: the
order is captured server-side and the capture response decides the
outcome. The booking id travels as purchase_units[0].reference_id, set
when the order was created.

PayPalGateway is deliberately absent from the `source` registry used by
/payments/callback, since its payload must come from our own capture call.
"""

from typing import Any, Mapping, Optional

import httpx

from muaythai.core.config import Settings
from muaythai.core.errors import GatewayConfigurationError, GatewayRequestError
from muaythai.core.logging import get_logger
from muaythai.models.booking import PaymentStatus
from muaythai.services.gateways.base import PaymentGateway, PaymentOutcome, as_text

logger = get_logger(__name__)

PAYPAL_PAYMENT_METHOD = "paypal"


def _first_unit(capture: Mapping[str, Any]) -> Mapping[str, Any]:
    units = capture.get("purchase_units") or []
    return units[0] if units else {}


def booking_reference(capture: Mapping[str, Any]) -> Optional[str]:
    return as_text(_first_unit(capture).get("reference_id"))


class PayPalGateway(PaymentGateway):
    name = "paypal"

    def parse_callback(self, payload: Mapping[str, Any]) -> PaymentOutcome:
        succeeded = payload.get("status") == "COMPLETED"
        captures = (_first_unit(payload).get("payments") or {}).get("captures") or []
        capture = captures[0] if captures else {}
        return PaymentOutcome(
            status=PaymentStatus.COMPLETED if succeeded else PaymentStatus.FAILED,
            transaction_id=as_text(capture.get("id")) or as_text(payload.get("id")),
            payment_method=PAYPAL_PAYMENT_METHOD,
            payment_date=as_text(capture.get("create_time")),
            message=None if succeeded else "Payment processing failed",
        )


class PayPalClient:
    """Minimal Orders v2 client: OAuth token + order capture."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = settings.PAYPAL_CLIENT_ID
        self.secret = settings.PAYPAL_SECRET
        self.api_url = (settings.PAYPAL_API_URL or "").rstrip("/")
        self.timeout = settings.PAYPAL_TIMEOUT
        self.transport = transport

    async def capture_order(self, order_id: str) -> dict:
        if not (self.client_id and self.secret and self.api_url):
            logger.error("paypal_configuration_missing")
            raise GatewayConfigurationError("Missing PayPal configuration")

        try:
            async with httpx.AsyncClient(
                base_url=self.api_url,
                timeout=httpx.Timeout(self.timeout, connect=3.0),
                transport=self.transport,
            ) as http:
                token_res = await http.post(
                    "/v1/oauth2/token",
                    data={"grant_type": "client_credentials"},
                    auth=(self.client_id, self.secret),
                )
                token_res.raise_for_status()
                access_token = token_res.json()["access_token"]

                capture_res = await http.post(
                    f"/v2/checkout/orders/{order_id}/capture",
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {access_token}",
                        "Prefer": "return=representation",
                    },
                )
                capture_res.raise_for_status()
                return capture_res.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "paypal_request_failed",
                order_id=order_id,
                status_code=exc.response.status_code,
                body=exc.response.text[:500],
            )
            raise GatewayRequestError() from exc
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("paypal_request_failed", order_id=order_id, error=str(exc))
            raise GatewayRequestError() from exc
