"""Merchant key check and rate limits for the checkout service."""

import hashlib
import logging
import os
import secrets

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import require_env

logger = logging.getLogger(__name__)

merchant_bearer = HTTPBearer()

# Starting a checkout and completing one are limited separately: completion
# moves money and is called once per order.
CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "60/minute")
COMPLETE_RATE_LIMIT = os.getenv("COMPLETE_RATE_LIMIT", "30/minute")


def merchant_rate_key(request: Request) -> str:
    """Bucket requests by the presented merchant key, falling back to the client address."""
    scheme, _, key = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and key:
        # the key itself never reaches limiter storage
        return "merchant:" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
    return get_remote_address(request)


limiter = Limiter(key_func=merchant_rate_key)


async def verify_merchant_key(credentials: HTTPAuthorizationCredentials = Security(merchant_bearer)) -> str:
    """Check the bearer key of the shop backend calling the checkout service.

    Returns:
        The verified key.

    Raises:
        HTTPException: 500 if ``API_KEY`` is not configured, 401 if the key does not match.
    """
    try:
        expected_key = require_env("API_KEY")
    except ValueError as e:
        raise HTTPException(status_code=500, detail="Server configuration error") from e
    if not secrets.compare_digest(credentials.credentials.encode("utf-8"), expected_key.encode("utf-8")):
        logger.warning("Rejected checkout call with an unknown merchant key")
        raise HTTPException(status_code=401, detail="Invalid API key")
    return credentials.credentials
