"""Reference HTTP API exposing the Express Checkout flow to a shop frontend."""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .auth import CHECKOUT_RATE_LIMIT, COMPLETE_RATE_LIMIT, limiter, verify_merchant_key
from .client import PaypalExpressClient
from .errors import (
    CustomFieldError,
    GatewayRejectedError,
    GatewayTimeoutError,
    PaypalError,
    TransportError,
)
from .models import CheckoutRequest, CompleteCheckoutRequest

logger = logging.getLogger(__name__)

app = FastAPI(title="PayPal Express Checkout - Reference API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@lru_cache(maxsize=1)
def get_client() -> PaypalExpressClient:
    """Process-wide client built from the environment."""
    try:
        return PaypalExpressClient.from_env()
    except ValueError as e:
        logger.error("PayPal client is not configured: %s", e)
        raise HTTPException(status_code=500, detail="Server configuration error") from e


def to_http_error(error: PaypalError) -> HTTPException:
    """Map a client error onto the status code the API answers with."""
    if isinstance(error, GatewayRejectedError):
        return HTTPException(status_code=402, detail=str(error))
    if isinstance(error, GatewayTimeoutError):
        return HTTPException(status_code=504, detail="Payment gateway timed out")
    if isinstance(error, TransportError):
        return HTTPException(status_code=502, detail=f"Payment gateway error: {error}")
    if isinstance(error, CustomFieldError):
        return HTTPException(status_code=422, detail=str(error))
    return HTTPException(status_code=500, detail="Payment gateway error")


@app.post("/checkout")
@limiter.limit(CHECKOUT_RATE_LIMIT)
def create_checkout(
    request: Request,
    body: CheckoutRequest,
    api_key: str = Depends(verify_merchant_key),
    client: PaypalExpressClient = Depends(get_client),
):
    try:
        redirect_url, response = client.pay(
            body.invoice_number,
            body.amount,
            body.description,
            body.currency,
            body.return_url,
            body.cancel_url,
        )
    except PaypalError as e:
        raise to_http_error(e) from e
    return {"redirect_url": redirect_url, "token": response.token, "response": response.as_dict()}


@app.get("/checkout/{token}")
@limiter.limit(CHECKOUT_RATE_LIMIT)
def get_checkout(
    request: Request,
    token: str,
    api_key: str = Depends(verify_merchant_key),
    client: PaypalExpressClient = Depends(get_client),
):
    """Look up a checkout without touching the payment; see ``CHECKOUTSTATUS``."""
    try:
        record = client.detail(token, complete=False)
    except PaypalError as e:
        raise to_http_error(e) from e
    return record.as_dict()


@app.post("/checkout/{token}/complete")
@limiter.limit(COMPLETE_RATE_LIMIT)
def complete_checkout(
    request: Request,
    token: str,
    body: Optional[CompleteCheckoutRequest] = None,
    api_key: str = Depends(verify_merchant_key),
    client: PaypalExpressClient = Depends(get_client),
):
    """Capture an approved checkout. Already completed checkouts are not charged twice."""
    notify_url = body.notify_url if body else None
    try:
        record = client.detail(token, notify_url=notify_url, complete=True)
    except PaypalError as e:
        raise to_http_error(e) from e
    return record.as_dict()


@app.get("/health")
async def health():
    return {"ok": True}
