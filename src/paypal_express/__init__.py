# paypal_express package
__version__ = "0.1.0"

from .client import (
    PaypalExpressClient,
    create,
    init,
    API_VERSION,
    SOLUTION_TYPE,
)
from .config import GatewaySettings, DEFAULT_TIMEOUT_MS
from .errors import (
    PaypalError,
    TransportError,
    GatewayTimeoutError,
    GatewayRejectedError,
    CustomFieldError,
)
from .models import (
    NVPRecord,
    CheckoutResponse,
    CheckoutDetails,
    PaymentResult,
    CheckoutRequest,
    CompleteCheckoutRequest,
)
from .nvp import prepare_number

__all__ = [
    "PaypalExpressClient",
    "create",
    "init",
    "API_VERSION",
    "SOLUTION_TYPE",
    "GatewaySettings",
    "DEFAULT_TIMEOUT_MS",
    # Errors
    "PaypalError",
    "TransportError",
    "GatewayTimeoutError",
    "GatewayRejectedError",
    "CustomFieldError",
    # Records
    "NVPRecord",
    "CheckoutResponse",
    "CheckoutDetails",
    "PaymentResult",
    "CheckoutRequest",
    "CompleteCheckoutRequest",
    "prepare_number",
]
