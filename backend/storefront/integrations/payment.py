"""
storefront/integrations/payment.py - Payment gateway (iyzico hosted checkout form) integration.

Starts a hosted checkout session via iyzico's API using the iyzipay SDK and reads back the
outcome of a session. The customer is redirected to `paymentPageUrl`; iyzico posts the
session token to the callback URL whatever the outcome, so the success route reads the
session back with `retrieve_session(token)` before creating the order and sends failed
payments to the cancel URL. The basket id is the buyer's user id, which lets the callback
find the buyer when the browser drops the session cookie on iyzico's cross-site POST.
"""
import json
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

import iyzipay

from storefront.core.errors import PaymentProviderError
from storefront.schemas.checkout import LineItem


def _read_json(response: Any) -> Dict[str, Any]:
    # The SDK hands back an HTTPResponse; tests and older versions may hand back a dict
    if isinstance(response, dict):
        return response
    raw = response.read() if hasattr(response, "read") else response
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


def _amount(minor_units: int) -> str:
    return f"{(Decimal(minor_units) / 100):.2f}"


class IyzicoCheckoutGateway:
    """Thin wrapper around `iyzipay.CheckoutFormInitialize` / `iyzipay.CheckoutForm`."""

    def __init__(self, api_key: str, secret_key: str, base_url: str, locale: str = "en"):
        self.options = {
            'api_key': api_key,
            'secret_key': secret_key,
            'base_url': base_url,
        }
        self.locale = locale

    @property
    def simulated(self) -> bool:
        return not self.options['api_key'] or not self.options['secret_key']

    def _basket(self, line_items: List[LineItem]) -> List[Dict[str, Any]]:
        # iyzico wants the line total per basket item, as a decimal string
        return [
            {
                "id": f"L{i + 1}",
                "name": item.name,
                "category1": "Products",
                "itemType": "PHYSICAL",
                "price": _amount(item.unit_amount * item.quantity),
            }
            for i, item in enumerate(line_items)
        ]

    def create_checkout_session(
        self,
        line_items: List[LineItem],
        success_url: str,
        cancel_url: str,
        customer: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        """
        Returns {"id": <session token>, "url": <page to redirect the customer to>}.
        Raises PaymentProviderError when iyzico errors or refuses the request.
        """
        conversation_id = uuid.uuid4().hex
        # If payment is disabled (no API keys configured), simulate a session for development.
        if self.simulated:
            logging.warning("Iyzico API keys not set - simulating checkout session %s", conversation_id)
            return {"id": f"SIMULATED-{conversation_id[:8]}", "url": success_url}

        customer = customer or {}
        name = customer.get("name") or "Customer"
        address = {
            "contactName": name,
            "city": customer.get("city", "Istanbul"),
            "country": customer.get("country", "Turkey"),
            "address": customer.get("address", "N/A"),
        }
        total = _amount(sum(item.unit_amount * item.quantity for item in line_items))
        request = {
            "locale": self.locale,
            "conversationId": conversation_id,
            "price": total,
            "paidPrice": total,
            "currency": (line_items[0].currency if line_items else "USD").upper(),
            "basketId": customer.get("id", conversation_id),
            "paymentGroup": "PRODUCT",
            "callbackUrl": success_url,
            "enabledInstallments": ["1"],
            "buyer": {
                "id": customer.get("id", conversation_id),
                "name": name.split(" ")[0],
                "surname": name.split(" ")[-1],
                "email": customer.get("email", ""),
                "identityNumber": "11111111111",  # required by iyzico; not collected by the shop
                "registrationAddress": address["address"],
                "city": address["city"],
                "country": address["country"],
                "ip": customer.get("ip", "0.0.0.0"),
            },
            "shippingAddress": address,
            "billingAddress": address,
            "basketItems": self._basket(line_items),
        }
        try:
            response = _read_json(iyzipay.CheckoutFormInitialize().create(request, self.options))
        except Exception as exc:
            # SDK call failed (network error, bad response body, ...)
            raise PaymentProviderError(f"Checkout session could not be created: {exc}") from exc

        if response.get("status") != "success":
            message = response.get("errorMessage") or response.get("message") or "Payment provider error"
            raise PaymentProviderError(message)
        return {"id": response["token"], "url": response["paymentPageUrl"]}

    def retrieve_session(self, token: str) -> Dict[str, Any]:
        """
        Reads back the session behind `token`:
        {"paid": bool, "paid_price": <decimal string or None>, "basket_id": <buyer user id or None>}.
        Simulated sessions count as paid; they carry no amount or buyer.
        """
        if self.simulated:
            return {"paid": True, "paid_price": None, "basket_id": None}
        request = {"locale": self.locale, "token": token}
        try:
            response = _read_json(iyzipay.CheckoutForm().retrieve(request, self.options))
        except Exception as exc:
            raise PaymentProviderError(f"Checkout session could not be retrieved: {exc}") from exc
        paid = response.get("status") == "success" and response.get("paymentStatus") == "SUCCESS"
        paid_price = response.get("paidPrice")
        return {
            "paid": paid,
            "paid_price": str(paid_price) if paid_price is not None else None,
            "basket_id": response.get("basketId"),
        }
