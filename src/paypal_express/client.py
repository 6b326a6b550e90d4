"""Express Checkout client for the PayPal NVP API."""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl

import httpx

from . import nvp
from .config import GatewaySettings, env_flag, require_env
from .errors import GatewayRejectedError, GatewayTimeoutError, TransportError
from .models import CheckoutDetails, CheckoutResponse, PaymentResult

logger = logging.getLogger(__name__)

API_VERSION = "121"
SOLUTION_TYPE = "Mark"

SANDBOX_API_URL = "https://api-3t.sandbox.paypal.com/nvp"
LIVE_API_URL = "https://api-3t.paypal.com/nvp"
SANDBOX_REDIRECT_URL = "https://www.sandbox.paypal.com/cgi-bin/webscr"
LIVE_REDIRECT_URL = "https://www.paypal.com/cgi-bin/webscr"

CHECKOUT_COMPLETED = "PaymentActionCompleted"
PAYMENT_COMPLETED = "Completed"

# Never logged in clear text
SENSITIVE_FIELDS = frozenset(["USER", "PWD", "SIGNATURE"])


class PaypalExpressClient:
    """
    Client for the SetExpressCheckout / GetExpressCheckoutDetails /
    DoExpressCheckoutPayment sequence.

    Instances hold only credentials and settings, so one client can be
    shared between threads. Every call opens its own connection.

    Example:
        client = PaypalExpressClient("user", "pwd", "sig", test=True)
        url, checkout = client.pay("INV-1", "10", "Order #1", "EUR",
                                   "https://shop/ok", "https://shop/cancel")
        # redirect the payer to ``url``; on return:
        details = client.detail(checkout.token)
        if details.paid:
            ...
    """

    def __init__(
        self,
        username: str,
        password: str,
        signature: str,
        test: bool = False,
        settings: Optional[GatewaySettings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._username = username
        self._password = password
        self._signature = signature
        self._test = bool(test)
        self._settings = settings or GatewaySettings()
        # injected in tests; None means real network I/O
        self._transport = transport
        self._url = SANDBOX_API_URL if self._test else LIVE_API_URL
        self._redirect = SANDBOX_REDIRECT_URL if self._test else LIVE_REDIRECT_URL

    @classmethod
    def from_env(
        cls,
        username: Optional[str] = None,
        password: Optional[str] = None,
        signature: Optional[str] = None,
        test: Optional[bool] = None,
        settings: Optional[GatewaySettings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "PaypalExpressClient":
        """Build a client, filling missing arguments from ``PAYPAL_*`` variables.

        Raises:
            ValueError: If a credential is neither passed nor set in the environment.
        """
        return cls(
            require_env("PAYPAL_API_USERNAME", username),
            require_env("PAYPAL_API_PASSWORD", password),
            require_env("PAYPAL_API_SIGNATURE", signature),
            test=env_flag("PAYPAL_SANDBOX") if test is None else test,
            settings=settings or GatewaySettings.from_env(),
            transport=transport,
        )

    @property
    def test(self) -> bool:
        return self._test

    @property
    def url(self) -> str:
        return self._url

    @property
    def redirect(self) -> str:
        return self._redirect

    @property
    def settings(self) -> GatewaySettings:
        return self._settings

    def params(self) -> Dict[str, str]:
        """Authentication fields shared by every call."""
        return {
            "USER": self._username,
            "PWD": self._password,
            "SIGNATURE": self._signature,
            "SOLUTIONTYPE": SOLUTION_TYPE,
            "VERSION": API_VERSION,
        }

    def pay(
        self,
        invoice_number: str,
        amount: nvp.Amount,
        description: str,
        currency: str,
        return_url: str,
        cancel_url: str,
    ) -> Tuple[str, CheckoutResponse]:
        """Start an Express Checkout.

        Args:
            invoice_number: Merchant invoice number, echoed back in the custom field.
            amount: Order total; normalized to two decimals.
            description: Order description shown to the payer.
            currency: Three-letter currency code.
            return_url: Where the payer lands after approving.
            cancel_url: Where the payer lands after cancelling.

        Returns:
            The URL to redirect the payer to, and the parsed response.

        Raises:
            GatewayRejectedError: If ACK is anything but ``Success``.
            TransportError: On HTTP failure or timeout.
        """
        total = nvp.prepare_number(amount)
        params = self.params()
        params.update({
            "PAYMENTACTION": "Sale",
            "PAYMENTREQUEST_0_AMT": total,
            "RETURNURL": return_url,
            "CANCELURL": cancel_url,
            "PAYMENTREQUEST_0_DESC": description,
            "NOSHIPPING": "1",
            "ALLOWNOTE": "1",
            "PAYMENTREQUEST_0_CURRENCYCODE": currency,
            "METHOD": "SetExpressCheckout",
            "INVNUM": invoice_number,
        })
        # The currency segment stays empty unless explicitly enabled; the
        # completion step only reads the amount segment.
        custom_currency = currency if self._settings.embed_currency_in_custom else None
        params["PAYMENTREQUEST_0_CUSTOM"] = nvp.build_custom(invoice_number, total, custom_currency)

        data = self.request(self._url, "POST", params)
        response = CheckoutResponse.from_nvp(data)
        if response.ack != "Success":
            long_message = data.get("L_LONGMESSAGE0")
            logger.warning(
                "SetExpressCheckout rejected for invoice %s: ACK %s (%s)",
                invoice_number, response.ack, long_message,
            )
            raise GatewayRejectedError(response.ack, long_message, data)

        redirect_url = f"{self._redirect}?cmd=_express-checkout&useraction=commit&token={response.token}"
        logger.info("Express checkout %s created for invoice %s", response.token, invoice_number)
        return redirect_url, response

    def detail(
        self,
        token: str,
        notify_url: Optional[str] = None,
        complete: bool = True,
    ) -> Union[CheckoutDetails, PaymentResult]:
        """Fetch checkout details and, unless already paid, complete the payment.

        With ``complete=False`` only the details are fetched; ``paid`` is then
        always True and says nothing about the payment itself, so inspect
        ``checkout_status`` instead.

        Args:
            token: Token returned by ``pay``.
            notify_url: IPN listener URL sent with the completion call.
            complete: Whether to call DoExpressCheckoutPayment.

        Returns:
            ``CheckoutDetails`` if no completion call was made, otherwise
            the ``PaymentResult`` of DoExpressCheckoutPayment.

        Raises:
            TransportError: If either HTTP call fails.
            CustomFieldError: If the checkout has no usable custom field.
        """
        params = self.params()
        params["TOKEN"] = token
        params["METHOD"] = "GetExpressCheckoutDetails"
        data = self.request(self._url, "POST", params)

        details = CheckoutDetails.from_nvp(data, paid=False)
        if not complete or details.checkout_status == CHECKOUT_COMPLETED:
            # never run DoExpressCheckoutPayment twice for the same token
            details.paid = True
            return details

        amount = nvp.parse_custom_amount(details.custom)

        params = self.params()
        params.update({
            "PAYMENTREQUEST_0_AMT": amount,
            "PAYERID": details.payer_id,
            "TOKEN": token,
            "METHOD": "DoExpressCheckoutPayment",
        })
        if notify_url:
            params["PAYMENTREQUEST_0_NOTIFYURL"] = notify_url
        data = self.request(self._url, "POST", params)

        result = PaymentResult.from_nvp(data, paid=False)
        if result.payment_status == PAYMENT_COMPLETED:
            result.paid = True
        else:
            logger.warning("Payment for token %s not completed: status %s", token, result.payment_status)
        return result

    def request(
        self,
        url: str,
        method: str,
        params: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, str]:
        """Send one NVP call and parse the response body.

        Any status above 200 is treated as a failure, including 201-299.

        Raises:
            TransportError: On a status above 200 or a connection failure.
                ``data`` holds the raw body text.
            GatewayTimeoutError: If no response arrives in time.
        """
        method = (method or "GET").upper()
        body = nvp.encode(params)
        headers = {}
        content = None
        if method == "GET":
            url = f"{url}?{body}"
        else:
            content = body.encode("utf-8")
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            headers["Content-Length"] = str(len(content))

        timeout = self._settings.timeout_seconds if timeout_ms is None else timeout_ms / 1000.0
        logger.info("PayPal %s %s (sandbox=%s)", method, params.get("METHOD"), self._test)
        logger.debug("PayPal request params: %s", _redact(params))

        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as http:
                response = http.request(method, url, content=content, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("PayPal %s timed out after %.1fs", params.get("METHOD"), timeout)
            raise GatewayTimeoutError() from e
        except httpx.HTTPError as e:
            logger.warning("PayPal %s failed: %s", params.get("METHOD"), e)
            raise TransportError(str(e)) from e

        if response.status_code > 200:
            logger.warning("PayPal %s returned HTTP %s", params.get("METHOD"), response.status_code)
            raise TransportError(str(response.status_code), status_code=response.status_code, data=response.text)

        return nvp.decode(response.text)


def create(
    username: str,
    password: str,
    signature: str,
    test: bool = False,
    settings: Optional[GatewaySettings] = None,
) -> PaypalExpressClient:
    """Shorthand for ``PaypalExpressClient(...)``."""
    return PaypalExpressClient(username, password, signature, test=test, settings=settings)


init = create


def _redact(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: ("***" if k in SENSITIVE_FIELDS else v) for k, v in params.items()}


def _redact_url(url: httpx.URL) -> httpx.URL:
    query = url.query.decode("ascii", "replace")
    if not query:
        return url
    pairs = parse_qsl(query, keep_blank_values=True)
    if not any(key in SENSITIVE_FIELDS for key, _ in pairs):
        return url
    return url.copy_with(query=nvp.encode(_redact(dict(pairs))).encode("ascii"))


class RedactCredentialsFilter(logging.Filter):
    """Masks USER/PWD/SIGNATURE in request URLs that httpx logs (GET calls)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                _redact_url(arg) if isinstance(arg, httpx.URL) else arg for arg in record.args
            )
        return True


logging.getLogger("httpx").addFilter(RedactCredentialsFilter())
