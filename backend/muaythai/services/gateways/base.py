"""
Payment gateway capability interface.
Each gateway turns its own callback payload into a PaymentOutcome; the
reconciler applies outcomes the same way regardless of which gateway
produced them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from muaythai.models.booking import PaymentStatus


@dataclass(frozen=True)
class PaymentOutcome:
    status: PaymentStatus
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    bank_code: Optional[str] = None
    bank_ref_code: Optional[str] = None
    payment_date: Optional[str] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is PaymentStatus.COMPLETED

    def payment_fields(self) -> dict:
        """Booking columns this outcome fills in; unreported values are left alone."""
        fields = {
            "payment_transaction_id": self.transaction_id,
            "payment_method": self.payment_method,
            "payment_bank_code": self.bank_code,
            "payment_bank_ref_code": self.bank_ref_code,
            "payment_date": self.payment_date,
        }
        return {column: value for column, value in fields.items() if value is not None}


class PaymentGateway(ABC):
    """
    Interface for payment gateway callback parsing.

    Implementations:
    - ModernPayGateway: JSON callback, success on status "success" or "0"
    - ChillPayGateway: customer redirect, success on Status "0" AND Code "200"
    - ChillPayWebhookGateway: signed background notification, success on PaymentStatus "0"
    """

    name: str

    @abstractmethod
    def parse_callback(self, payload: Mapping[str, Any]) -> PaymentOutcome:
        """
        Map a gateway payload to an internal outcome.

        Raises:
            ValidationError: the payload is malformed or fails verification
        """


def as_text(value: Any) -> Optional[str]:
    """Gateways send the same field as a string or a number depending on channel."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
