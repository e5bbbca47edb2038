"""
Tests for gateway callback parsing (no database involved).
"""

import hashlib

import pytest

from muaythai.core.config import Settings
from muaythai.core.errors import GatewayConfigurationError, UnknownGatewaySourceError, ValidationError
from muaythai.models.booking import PaymentStatus
from muaythai.services.gateways import (
    ChillPayGateway,
    ChillPayWebhookGateway,
    ModernPayGateway,
    PayPalGateway,
    booking_reference,
    build_gateways,
    get_gateway,
)
from muaythai.services.gateways.chillpay import WEBHOOK_CHECKSUM_FIELDS, webhook_checksum


def paypal_capture(status: str = "COMPLETED", reference_id: str = "booking-1") -> dict:
    return {
        "id": "ORDER-1",
        "status": status,
        "purchase_units": [{
            "reference_id": reference_id,
            "payments": {"captures": [{"id": "CAP-1", "status": status, "create_time": "2026-10-19T10:15:00Z"}]},
        }],
    }


@pytest.mark.parametrize("status", ["success", "0"])
def test_modernpay_success_statuses(status):
    outcome = ModernPayGateway().parse_callback({
        "status": status,
        "transactionId": "MP-1001",
        "paymentMethod": "promptpay",
        "bankCode": "KBANK",
        "bankRefCode": "REF-77",
        "paymentDate": "2026-10-19 10:00:00",
    })
    assert outcome.status is PaymentStatus.COMPLETED
    assert outcome.succeeded
    assert outcome.payment_fields() == {
        "payment_transaction_id": "MP-1001",
        "payment_method": "promptpay",
        "payment_bank_code": "KBANK",
        "payment_bank_ref_code": "REF-77",
        "payment_date": "2026-10-19 10:00:00",
    }


@pytest.mark.parametrize("status", ["failed", "1", "SUCCESS ", " success", "Success", 0, "cancelled", None])
def test_modernpay_anything_else_fails(status):
    outcome = ModernPayGateway().parse_callback({"status": status})
    assert outcome.status is PaymentStatus.FAILED


def test_modernpay_defaults_payment_method():
    outcome = ModernPayGateway().parse_callback({"status": "success", "transactionId": "MP-1"})
    assert outcome.payment_method == "modernpay"


@pytest.mark.parametrize("amount", ["", "1,600.00", None, 1600, {"value": 1600}])
def test_modernpay_amount_does_not_affect_outcome(amount):
    outcome = ModernPayGateway().parse_callback({"status": "success", "transactionId": "MP-2", "amount": amount})
    assert outcome.status is PaymentStatus.COMPLETED


def test_modernpay_rejects_non_scalar_fields():
    with pytest.raises(ValidationError):
        ModernPayGateway().parse_callback({"status": "success", "transactionId": {"id": "MP-3"}})


@pytest.mark.parametrize(
    "status, code, expected",
    [
        ("0", "200", PaymentStatus.COMPLETED),
        ("0", "500", PaymentStatus.FAILED),
        ("1", "200", PaymentStatus.FAILED),
        ("0", None, PaymentStatus.FAILED),
        (None, "200", PaymentStatus.FAILED),
        (" 0", "200", PaymentStatus.FAILED),
        ("0", "200 ", PaymentStatus.FAILED),
    ],
)
def test_chillpay_requires_status_and_code(status, code, expected):
    """Status "0" alone or Code "200" alone is not a success."""
    outcome = ChillPayGateway().parse_callback({"Status": status, "Code": code, "TransactionId": "CP-9"})
    assert outcome.status is expected
    assert outcome.payment_method == "credit-card"
    assert outcome.transaction_id == "CP-9"


def _signed_notification(secret: str, **fields) -> dict:
    payload = {name: "" for name in WEBHOOK_CHECKSUM_FIELDS}
    payload.update(fields)
    raw = "".join(payload[name] for name in WEBHOOK_CHECKSUM_FIELDS) + secret
    payload["CheckSum"] = hashlib.md5(raw.encode("utf-8")).hexdigest()
    return payload


def test_webhook_checksum_matches_field_order():
    payload = _signed_notification("s3cret", TransactionId="1", Amount="2", OrderNo="3", CustomerName="Jane")
    assert webhook_checksum(payload, "s3cret") == payload["CheckSum"]
    # Surrounding whitespace in the configured secret is ignored
    assert webhook_checksum(payload, "  s3cret\n") == payload["CheckSum"]


def test_webhook_valid_checksum_parses_outcome():
    payload = _signed_notification(
        "s3cret",
        TransactionId="CP-100",
        OrderNo="ORDER-1",
        PaymentStatus="0",
        BankCode="SCB",
        BankRefCode="BR-1",
        PaymentDate="20261019101500",
    )
    outcome = ChillPayWebhookGateway("s3cret").parse_callback(payload)
    assert outcome.status is PaymentStatus.COMPLETED
    assert outcome.bank_code == "SCB"
    assert outcome.bank_ref_code == "BR-1"
    assert outcome.payment_date == "20261019101500"


@pytest.mark.parametrize("payment_status", ["2", " 0", "0 "])
def test_webhook_non_zero_payment_status_fails(payment_status):
    payload = _signed_notification("s3cret", OrderNo="ORDER-1", PaymentStatus=payment_status)
    outcome = ChillPayWebhookGateway("s3cret").parse_callback(payload)
    assert outcome.status is PaymentStatus.FAILED


def test_webhook_tampered_payload_rejected():
    payload = _signed_notification("s3cret", OrderNo="ORDER-1", PaymentStatus="2")
    payload["PaymentStatus"] = "0"
    with pytest.raises(ValidationError) as exc_info:
        ChillPayWebhookGateway("s3cret").parse_callback(payload)
    assert exc_info.value.message == "Invalid checksum"


def test_webhook_without_secret_is_configuration_error():
    with pytest.raises(GatewayConfigurationError):
        ChillPayWebhookGateway(None).parse_callback({"CheckSum": "x"})


def test_gateway_registry():
    settings = Settings(REDIS_ENABLED=False, CHILLPAY_MD5_SECRET="s3cret")
    assert set(build_gateways(settings)) == {"modernpay", "chillpay", "chillpay-webhook"}
    assert isinstance(get_gateway("modernpay", settings), ModernPayGateway)

    # Source names are matched exactly
    with pytest.raises(UnknownGatewaySourceError):
        get_gateway("ModernPay", settings)

    with pytest.raises(UnknownGatewaySourceError) as exc_info:
        get_gateway("paypal", settings)
    assert exc_info.value.message == "Unknown payment source: paypal"


def test_paypal_completed_capture():
    outcome = PayPalGateway().parse_callback(paypal_capture())
    assert outcome.status is PaymentStatus.COMPLETED
    assert outcome.transaction_id == "CAP-1"
    assert outcome.payment_method == "paypal"
    assert outcome.payment_date == "2026-10-19T10:15:00Z"
    assert outcome.message is None


@pytest.mark.parametrize("status", ["PENDING", "DECLINED", "completed", None])
def test_paypal_other_statuses_fail(status):
    outcome = PayPalGateway().parse_callback(paypal_capture(status=status))
    assert outcome.status is PaymentStatus.FAILED
    assert outcome.message == "Payment processing failed"


def test_paypal_transaction_falls_back_to_order_id():
    outcome = PayPalGateway().parse_callback({"id": "ORDER-9", "status": "COMPLETED", "purchase_units": []})
    assert outcome.transaction_id == "ORDER-9"


def test_paypal_booking_reference():
    assert booking_reference(paypal_capture(reference_id="booking-42")) == "booking-42"
    assert booking_reference({"id": "ORDER-1", "purchase_units": []}) is None
    assert booking_reference({}) is None


def test_paypal_is_not_a_callback_source():
    settings = Settings(REDIS_ENABLED=False, PAYPAL_CLIENT_ID="id", PAYPAL_SECRET="x", PAYPAL_API_URL="https://paypal.test")
    assert "paypal" not in build_gateways(settings)
