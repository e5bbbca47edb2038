"""
Pydantic schemas for payment gateway callbacks.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ModernPayCallback(BaseModel):
    """JSON body ModernPay posts to /payments/callback?source=modernpay."""

    # Compared against literal strings; not coerced
    status: Any = None
    transactionId: Optional[str] = None
    # Informational only; ModernPay sends numbers, numeric strings or ""
    amount: Any = None
    paymentMethod: Optional[str] = None
    bankCode: Optional[str] = None
    bankRefCode: Optional[str] = None
    paymentDate: Optional[str] = None

    # ModernPay adds fields between releases; keep them for the log line
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class PaymentCallbackResponse(BaseModel):
    success: bool = True
    message: str
    booking_id: str = Field(..., serialization_alias="bookingId")
    status: str
    applied: bool


class WebhookAck(BaseModel):
    status: str = "success"
    message: Optional[str] = None
