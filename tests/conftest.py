"""Shared test fixtures and configuration."""

import os
import pytest
from typing import Dict, List, Optional
from urllib.parse import parse_qsl, urlencode

import httpx

# Set up test environment variables before importing modules
os.environ.setdefault("API_KEY", "test_api_key_12345")
os.environ.setdefault("PAYPAL_API_USERNAME", "merchant_api1.example.com")
os.environ.setdefault("PAYPAL_API_PASSWORD", "TESTPWD123")
os.environ.setdefault("PAYPAL_API_SIGNATURE", "A1b2C3d4-signature")
os.environ.setdefault("PAYPAL_SANDBOX", "true")

from paypal_express.client import PaypalExpressClient


class FakeGateway:
    """Queue of canned NVP responses served through httpx.MockTransport."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses = []

    def reply(self, status_code: int = 200, body: Optional[str] = None, **fields) -> "FakeGateway":
        text = body if body is not None else urlencode(fields)
        self._responses.append(httpx.Response(status_code, text=text))
        return self

    def fail_with(self, error: Exception) -> "FakeGateway":
        self._responses.append(error)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"unexpected request to {request.url}")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def sent(self, index: int = -1) -> Dict[str, str]:
        """Parameters of a recorded request, from body or query string."""
        request = self.requests[index]
        if request.method == "GET":
            return dict(parse_qsl(request.url.query.decode(), keep_blank_values=True))
        return dict(parse_qsl(request.content.decode(), keep_blank_values=True))


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(gateway) -> PaypalExpressClient:
    """Sandbox client wired to the fake gateway."""
    return PaypalExpressClient(
        "merchant_api1.example.com",
        "TESTPWD123",
        "A1b2C3d4-signature",
        test=True,
        transport=gateway.transport,
    )


@pytest.fixture
def checkout_success_fields() -> Dict[str, str]:
    return {
        "TOKEN": "EC-8AB12345CD678901E",
        "TIMESTAMP": "2026-10-17T10:00:00Z",
        "CORRELATIONID": "a1b2c3d4e5f6",
        "ACK": "Success",
        "VERSION": "121",
        "BUILD": "000000",
    }


@pytest.fixture
def details_fields() -> Dict[str, str]:
    return {
        "TOKEN": "EC-8AB12345CD678901E",
        "CHECKOUTSTATUS": "PaymentActionNotInitiated",
        "ACK": "Success",
        "EMAIL": "buyer@example.com",
        "PAYERID": "PAYER12345",
        "PAYMENTREQUEST_0_CUSTOM": "INV-1001|25.50|",
        "PAYMENTREQUEST_0_AMT": "25.50",
        "PAYMENTREQUEST_0_CURRENCYCODE": "EUR",
        "PAYMENTREQUEST_0_INVNUM": "INV-1001",
    }


@pytest.fixture
def payment_fields() -> Dict[str, str]:
    return {
        "TOKEN": "EC-8AB12345CD678901E",
        "ACK": "Success",
        "PAYMENTINFO_0_TRANSACTIONID": "7JK12345AB678901C",
        "PAYMENTINFO_0_PAYMENTSTATUS": "Completed",
        "PAYMENTINFO_0_PENDINGREASON": "None",
        "PAYMENTINFO_0_AMT": "25.50",
        "PAYMENTINFO_0_CURRENCYCODE": "EUR",
    }


@pytest.fixture
def auth_headers():
    """Return headers with authentication."""
    return {"Authorization": "Bearer test_api_key_12345"}
