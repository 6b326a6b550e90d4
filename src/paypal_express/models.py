"""Typed records for NVP responses and checkout input."""

from typing import Any, ClassVar, Dict, Mapping, Optional
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


class NVPRecord(BaseModel):
    """A parsed gateway response. ``raw`` keeps every field the gateway sent."""

    # attribute name -> NVP key; subclasses extend this
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "ack": "ACK",
        "correlation_id": "CORRELATIONID",
        "timestamp": "TIMESTAMP",
    }

    raw: Dict[str, str] = Field(default_factory=dict)
    ack: Optional[str] = None
    correlation_id: Optional[str] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_nvp(cls, data: Mapping[str, str], **extra: Any):
        values = {attr: data.get(key) for attr, key in cls.FIELD_MAP.items()}
        values.update(extra)
        return cls(raw=dict(data), **values)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.raw.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Raw fields plus the derived ``PAID`` flag where the record has one."""
        result: Dict[str, Any] = dict(self.raw)
        paid = getattr(self, "paid", None)
        if paid is not None:
            result["PAID"] = paid
        return result


class CheckoutResponse(NVPRecord):
    """SetExpressCheckout response."""
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        **NVPRecord.FIELD_MAP,
        "token": "TOKEN",
    }

    token: Optional[str] = None


class CheckoutDetails(NVPRecord):
    """GetExpressCheckoutDetails response."""
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        **NVPRecord.FIELD_MAP,
        "token": "TOKEN",
        "payer_id": "PAYERID",
        "email": "EMAIL",
        "checkout_status": "CHECKOUTSTATUS",
        "custom": "PAYMENTREQUEST_0_CUSTOM",
        "amount": "PAYMENTREQUEST_0_AMT",
        "currency_code": "PAYMENTREQUEST_0_CURRENCYCODE",
        "invoice_number": "PAYMENTREQUEST_0_INVNUM",
    }

    token: Optional[str] = None
    payer_id: Optional[str] = None
    email: Optional[str] = None
    checkout_status: Optional[str] = None
    custom: Optional[str] = None
    amount: Optional[str] = None
    currency_code: Optional[str] = None
    invoice_number: Optional[str] = None
    paid: bool = False


class PaymentResult(NVPRecord):
    """DoExpressCheckoutPayment response."""
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        **NVPRecord.FIELD_MAP,
        "token": "TOKEN",
        "transaction_id": "PAYMENTINFO_0_TRANSACTIONID",
        "payment_status": "PAYMENTINFO_0_PAYMENTSTATUS",
        "pending_reason": "PAYMENTINFO_0_PENDINGREASON",
        "amount": "PAYMENTINFO_0_AMT",
        "currency_code": "PAYMENTINFO_0_CURRENCYCODE",
    }

    token: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_status: Optional[str] = None
    pending_reason: Optional[str] = None
    amount: Optional[str] = None
    currency_code: Optional[str] = None
    paid: bool = False


class CheckoutRequest(BaseModel):
    """Input for starting an Express Checkout."""
    invoice_number: str = Field(..., min_length=1, max_length=127)
    amount: Decimal = Field(..., gt=0, description="Order total in major units")
    description: str = Field("", max_length=127)
    currency: str = Field(..., description="Three-letter currency code")
    return_url: str
    cancel_url: str

    @field_validator("currency")
    @classmethod
    def currency_must_be_iso(cls, value: str) -> str:
        if len(value) != 3 or not value.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return value.upper()


class CompleteCheckoutRequest(BaseModel):
    """Optional input for completing a checkout."""
    notify_url: Optional[str] = Field(None, description="IPN listener URL")
