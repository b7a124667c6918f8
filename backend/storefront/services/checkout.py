# storefront/services/checkout.py
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from storefront.core.errors import PaymentProviderError, ValidationError
from storefront.repositories import orders as orders_repo
from storefront.repositories import users as users_repo
from storefront.schemas.cart import CartLine
from storefront.schemas.checkout import CheckoutSession, LineItem
from storefront.schemas.order import Order
from storefront.services.cart import cart_total, resolve_cart
from storefront.services.orders import place_order


def to_minor_units(price: float) -> int:
    return int((Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_line_items(lines: List[CartLine], currency: str) -> List[LineItem]:
    return [
        LineItem(
            currency=currency.lower(),
            unit_amount=to_minor_units(line.product.price),
            name=line.product.title,
            description=line.product.description or None,
            quantity=line.quantity,
        )
        for line in lines
    ]


def create_checkout_session(
    gateway,
    lines: List[CartLine],
    success_url: str,
    cancel_url: str,
    currency: str = "usd",
    customer: Optional[Dict[str, Any]] = None,
) -> CheckoutSession:
    """
    Hands the cart to the payment provider and returns what the checkout page shows:
    the provider's session id, where to send the customer, and the cart total.
    Provider failures propagate as PaymentProviderError (no retry).
    """
    if not lines:
        raise ValidationError("Your cart is empty.", ["cart"])
    try:
        session = gateway.create_checkout_session(
            build_line_items(lines, currency), success_url, cancel_url, customer=customer,
        )
    except PaymentProviderError:
        raise
    except Exception as exc:
        raise PaymentProviderError(str(exc)) from exc
    return CheckoutSession(
        session_id=session["id"],
        redirect_url=session["url"],
        total=cart_total(lines),
    )


def confirm_payment(
    db, gateway, token: Optional[str], user: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Provider sent the customer back with `token`: returns the paying user, or None to refuse.
    - The payer is the logged-in user, or the buyer recorded as the session's basket id
      (iyzico's callback is a cross-site POST and may arrive without the session cookie).
    - Refused: a token that already placed an order, an unpaid session, a session of
      another user, a paid amount different from the current cart total.
    - No token: only a simulated gateway lets the logged-in user through.
    """
    if not token:
        return user if user is not None and getattr(gateway, "simulated", False) else None

    if orders_repo.find_by_payment_token(db, token):
        logging.warning("Payment token %s already placed an order", token)
        return None

    session = gateway.retrieve_session(token)
    if not session.get("paid"):
        return None

    buyer_id = session.get("basket_id")
    if user is None:
        user = users_repo.get(db, buyer_id) if buyer_id else None
        if user is None:
            return None
    elif buyer_id and buyer_id != user["id"]:
        logging.warning("Payment token %s belongs to %s, not %s", token, buyer_id, user["id"])
        return None

    paid_price = session.get("paid_price")
    if paid_price is not None:
        due = to_minor_units(cart_total(resolve_cart(db, user)))
        if to_minor_units(paid_price) != due:
            logging.warning("Paid %s for token %s but cart of %s is due %d", paid_price, token, user["id"], due)
            return None
    return user


def on_checkout_success(db, user: Dict[str, Any], payment_token: Optional[str] = None) -> Order:
    """Provider confirmed the payment: same as placing the order from the cart."""
    return place_order(db, user, payment_token=payment_token)
