"""NVP wire helpers: amount formatting, form codec and the custom field."""

from decimal import Decimal
from typing import Dict, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

from .errors import CustomFieldError

Amount = Union[int, float, Decimal, str]

CUSTOM_SEPARATOR = "|"


def prepare_number(value: Amount) -> str:
    """Format an amount with exactly two decimal digits.

    A comma decimal separator is accepted. Extra digits are truncated,
    not rounded: ``5.999`` becomes ``5.99``.
    """
    if isinstance(value, (Decimal, float)):
        # fixed-point, never exponent form such as 1E+2
        text = format(value, "f")
    else:
        text = str(value).strip().replace(",", ".", 1)
    whole, _, fraction = text.partition(".")
    if not fraction:
        return whole + ".00"
    if len(fraction) == 1:
        return text + "0"
    if len(fraction) > 2:
        return whole + "." + fraction[:2]
    return text


def encode(params: Mapping[str, object]) -> str:
    """URL-encode a parameter set, dropping ``None`` values."""
    return urlencode([(k, str(v)) for k, v in params.items() if v is not None])


def decode(body: str) -> Dict[str, str]:
    """Parse an NVP response body. Later duplicates win."""
    return dict(parse_qsl(body, keep_blank_values=True))


def build_custom(invoice_number: object, amount: str, currency: Optional[str] = None) -> str:
    return CUSTOM_SEPARATOR.join([str(invoice_number), amount, currency or ""])


def parse_custom_amount(custom: Optional[str]) -> str:
    """Return the amount segment of a custom field written by ``build_custom``."""
    if not custom:
        raise CustomFieldError("PAYMENTREQUEST_0_CUSTOM is missing", custom)
    parts = custom.split(CUSTOM_SEPARATOR)
    if len(parts) < 2 or not parts[1]:
        raise CustomFieldError(f"PAYMENTREQUEST_0_CUSTOM has no amount segment: {custom!r}", custom)
    return parts[1]
