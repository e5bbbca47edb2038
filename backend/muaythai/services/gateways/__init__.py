"""
Gateway registry keyed by the callback `source` parameter.
"""

from typing import Optional

from muaythai.core.config import Settings
from muaythai.core.errors import UnknownGatewaySourceError
from muaythai.services.gateways.base import PaymentGateway, PaymentOutcome
from muaythai.services.gateways.chillpay import ChillPayGateway, ChillPayWebhookGateway
from muaythai.services.gateways.modernpay import ModernPayGateway
from muaythai.services.gateways.paypal import PayPalClient, PayPalGateway, booking_reference


def build_gateways(settings: Settings) -> dict[str, PaymentGateway]:
    gateways = [
        ModernPayGateway(),
        ChillPayGateway(),
        ChillPayWebhookGateway(settings.CHILLPAY_MD5_SECRET),
    ]
    return {gateway.name: gateway for gateway in gateways}


def get_gateway(source: Optional[str], settings: Settings) -> PaymentGateway:
    gateway = build_gateways(settings).get(source or "")
    if gateway is None:
        raise UnknownGatewaySourceError(source)
    return gateway


__all__ = [
    "PaymentGateway", "PaymentOutcome",
    "ModernPayGateway", "ChillPayGateway", "ChillPayWebhookGateway",
    "PayPalGateway", "PayPalClient", "booking_reference",
    "build_gateways", "get_gateway",
]
