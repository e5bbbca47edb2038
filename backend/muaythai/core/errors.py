"""
Error taxonomy for the booking and payment workflow.

Services raise these; the handlers registered in main.py render every one
as ``{"error": message, "details": ...}`` with the matching status code.
"""

from typing import Any, Optional

from fastapi import status


class BookingServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(BookingServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class UnresolvedTicketError(ValidationError):
    default_message = "One or more tickets could not be resolved"


class MissingBookingIdError(ValidationError):
    default_message = "Missing bookingId parameter"


class UnknownGatewaySourceError(ValidationError):
    def __init__(self, source: Optional[str]):
        self.source = source
        super().__init__(f"Unknown payment source: {source}")


class NotFoundError(BookingServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PersistenceError(BookingServiceError):
    default_message = "Failed to process request"


class UnauthorizedError(BookingServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ConfigurationError(BookingServiceError):
    default_message = "Server configuration error"


class GatewayConfigurationError(ConfigurationError):
    default_message = "Payment gateway is not configured"


class GatewayRequestError(BookingServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment processing error"
