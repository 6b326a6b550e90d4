"""Exceptions raised by the Express Checkout client."""

from typing import Any, Dict, Optional


class PaypalError(Exception):
    """Base error. ``data`` holds whatever the gateway sent back, if anything."""

    def __init__(self, message: str, data: Any = None):
        super().__init__(message)
        self.data = data


class TransportError(PaypalError):
    """The HTTP exchange failed: bad status code or connection problem."""

    def __init__(self, message: str, status_code: Optional[int] = None, data: Optional[str] = None):
        super().__init__(message, data)
        self.status_code = status_code


class GatewayTimeoutError(TransportError):
    """No response arrived within the configured timeout."""

    def __init__(self, message: str = "timeout"):
        super().__init__(message)


class GatewayRejectedError(PaypalError):
    """The gateway answered, but ACK was not ``Success``."""

    def __init__(self, ack: Optional[str], long_message: Optional[str], data: Optional[Dict[str, str]] = None):
        super().__init__(f"ACK {ack}: {long_message}", data)
        self.ack = ack
        self.long_message = long_message


class CustomFieldError(PaypalError, ValueError):
    """PAYMENTREQUEST_0_CUSTOM is missing or has no amount segment."""
