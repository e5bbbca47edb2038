"""
ModernPay callback parsing.
"""

from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from muaythai.core.errors import ValidationError
from muaythai.models.booking import PaymentStatus
from muaythai.schemas.payment import ModernPayCallback
from muaythai.services.gateways.base import PaymentGateway, PaymentOutcome, as_text

SUCCESS_STATUSES = frozenset({"success", "0"})


class ModernPayGateway(PaymentGateway):
    name = "modernpay"

    def parse_callback(self, payload: Mapping[str, Any]) -> PaymentOutcome:
        try:
            callback = ModernPayCallback.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise ValidationError("Invalid ModernPay callback", details=exc.errors(include_url=False, include_context=False)) from exc

        succeeded = isinstance(callback.status, str) and callback.status in SUCCESS_STATUSES
        return PaymentOutcome(
            status=PaymentStatus.COMPLETED if succeeded else PaymentStatus.FAILED,
            transaction_id=as_text(callback.transactionId),
            payment_method=as_text(callback.paymentMethod) or self.name,
            bank_code=as_text(callback.bankCode),
            bank_ref_code=as_text(callback.bankRefCode),
            payment_date=as_text(callback.paymentDate),
        )
