"""
Simple merchant usage example (server-side). The merchant starts a checkout,
redirects the payer to PayPal, and completes the payment when the payer
comes back to the return URL with ``?token=...``.
"""
import logging
import os
import sys

from paypal_express import PaypalExpressClient, PaypalError


def run(token=None):
    logging.basicConfig(level=logging.INFO)
    os.environ.setdefault("PAYPAL_SANDBOX", "true")  # set PAYPAL_API_* in env
    client = PaypalExpressClient.from_env()

    if token is None:
        try:
            redirect_url, response = client.pay(
                invoice_number="INV-1001",
                amount="19.9",
                description="Example order",
                currency="USD",
                return_url="https://shop.example/paypal/return",
                cancel_url="https://shop.example/paypal/cancel",
            )
        except PaypalError as e:
            print("Checkout failed:", e)
            return
        print("Send the payer to:", redirect_url)
        print("Token:", response.token)
        return

    result = client.detail(token, notify_url="https://shop.example/paypal/ipn")
    print("Paid:", result.paid)
    print("Response:", result.as_dict())


if __name__ == "__main__":
    run(sys.argv[1] if len(sys.argv) > 1 else None)
