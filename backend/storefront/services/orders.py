# storefront/services/orders.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storefront.core.errors import NotFoundError, ValidationError
from storefront.repositories import orders as repo
from storefront.schemas.cart import CartLine
from storefront.schemas.order import Order, OrderLine, ProductSnapshot
from storefront.services.cart import resolve_cart


def snapshot_lines(lines: List[CartLine]) -> List[OrderLine]:
    """Copies product data by value so later catalog edits leave the order alone."""
    return [
        OrderLine(
            quantity=line.quantity,
            product=ProductSnapshot(**line.product.model_dump()),
        )
        for line in lines
    ]


def build_order_doc(
    user: Dict[str, Any], lines: List[OrderLine], payment_token: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "user_id": user["id"],
        "user_name": user.get("name", "") or "",
        "user_email": user.get("email", "") or "",
        "products": [line.model_dump() for line in lines],
        "payment_token": payment_token,
    }


def place_order(db, user: Dict[str, Any], payment_token: Optional[str] = None) -> Order:
    """
    Turns the user's cart into an order and empties the cart.
    - Product details are resolved now and frozen into the order.
    - Empty cart → ValidationError (nothing is written).
    - Order write + cart clear go out in one batch.
    - A `payment_token` is stored on the order and fixes its id, so one payment places one order.
    """
    lines = snapshot_lines(resolve_cart(db, user))
    if not lines:
        raise ValidationError("Your cart is empty.", ["cart"])

    order_doc = build_order_doc(user, lines, payment_token)
    order_id = repo.create_and_clear_cart(
        db, user["id"], order_doc,
        order_id=repo.id_for_payment(payment_token) if payment_token else None,
    )
    user["cart"] = {"items": []}
    return Order.from_doc(order_id, {**order_doc, "created_at": datetime.now(timezone.utc)})


def list_orders(db, user_id: str) -> List[Order]:
    orders = [Order.from_doc(d["id"], d) for d in repo.list_for_user(db, user_id)]
    # Firestore needs a composite index for where+order_by; sort here instead
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(orders, key=lambda o: o.created_at or epoch, reverse=True)


def get_order(db, order_id: str) -> Order:
    doc = repo.get(db, order_id)
    if not doc:
        raise NotFoundError("No order found.")
    return Order.from_doc(doc["id"], doc)
