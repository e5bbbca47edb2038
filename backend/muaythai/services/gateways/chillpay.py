"""
ChillPay callback parsing.

ChillPay reports a payment twice:

  * customer redirect (GET, query string): Status/Code/Message/TransactionId/
    Amount/OrderNo. Only Status == "0" together with Code == "200" is a
    success; either alone is a failure.
  * background notification (POST, form): signed with an MD5 checksum over
    the notification fields plus the merchant secret. PaymentStatus == "0"
    is a success.
"""

import hashlib
import hmac
from typing import Any, Mapping, Optional

from muaythai.core.errors import GatewayConfigurationError, ValidationError
from muaythai.core.logging import get_logger
from muaythai.models.booking import PaymentStatus
from muaythai.services.gateways.base import PaymentGateway, PaymentOutcome, as_text

logger = get_logger(__name__)

CHILLPAY_PAYMENT_METHOD = "credit-card"

# Field order is fixed by the ChillPay merchant manual
WEBHOOK_CHECKSUM_FIELDS = (
    "TransactionId",
    "Amount",
    "OrderNo",
    "CustomerId",
    "BankCode",
    "PaymentDate",
    "PaymentStatus",
    "BankRefCode",
    "CurrentDate",
    "CurrentTime",
    "PaymentDescription",
    "CreditCardToken",
    "Currency",
    "CustomerName",
)


class ChillPayGateway(PaymentGateway):
    name = "chillpay"

    def parse_callback(self, payload: Mapping[str, Any]) -> PaymentOutcome:
        succeeded = payload.get("Status") == "0" and payload.get("Code") == "200"
        return PaymentOutcome(
            status=PaymentStatus.COMPLETED if succeeded else PaymentStatus.FAILED,
            transaction_id=as_text(payload.get("TransactionId")),
            payment_method=CHILLPAY_PAYMENT_METHOD,
            message=as_text(payload.get("Message")),
        )


def webhook_checksum(payload: Mapping[str, Any], secret: str) -> str:
    parts = [str(payload.get(name) or "") for name in WEBHOOK_CHECKSUM_FIELDS]
    parts.append(secret.strip())
    return hashlib.md5("".join(parts).encode("utf-8")).hexdigest()


class ChillPayWebhookGateway(PaymentGateway):
    name = "chillpay-webhook"

    def __init__(self, md5_secret: Optional[str]):
        self.md5_secret = md5_secret

    def verify(self, payload: Mapping[str, Any]) -> None:
        if not self.md5_secret:
            raise GatewayConfigurationError("Configuration error")

        received = str(payload.get("CheckSum") or "")
        expected = webhook_checksum(payload, self.md5_secret)
        if not hmac.compare_digest(expected, received.lower()):
            logger.warning("chillpay_checksum_mismatch", order_no=payload.get("OrderNo"))
            raise ValidationError("Invalid checksum")

    def parse_callback(self, payload: Mapping[str, Any]) -> PaymentOutcome:
        self.verify(payload)
        succeeded = payload.get("PaymentStatus") == "0"
        return PaymentOutcome(
            status=PaymentStatus.COMPLETED if succeeded else PaymentStatus.FAILED,
            transaction_id=as_text(payload.get("TransactionId")),
            payment_method=CHILLPAY_PAYMENT_METHOD,
            bank_code=as_text(payload.get("BankCode")),
            bank_ref_code=as_text(payload.get("BankRefCode")),
            payment_date=as_text(payload.get("PaymentDate")),
            message=as_text(payload.get("PaymentDescription")),
        )
