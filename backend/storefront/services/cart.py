"""
storefront/services/cart.py - Cart mutations on the embedded `user.cart.items` array.

Every mutation reads the cart from the user dict it is given, changes it and writes the
whole item list back (read-modify-write, last writer wins). The user dict is updated in
place so the caller sees the new cart without reloading.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List

from storefront.repositories import products as products_repo
from storefront.repositories import users as users_repo
from storefront.schemas.cart import CartLine
from storefront.schemas.product import Product


def _items(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    return list((user.get("cart") or {}).get("items", []) or [])


def _save(db, user: Dict[str, Any], items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    users_repo.save_cart(db, user["id"], items)
    user["cart"] = {"items": items}
    return items


def add_to_cart(db, user: Dict[str, Any], product: Product) -> List[Dict[str, Any]]:
    """Adds one unit; a product already in the cart gets its quantity bumped instead of a new line."""
    items = _items(user)
    for i, it in enumerate(items):
        if it.get("product_id") == product.id:
            # new dict: the user's cart stays untouched until the write succeeds
            items[i] = {**it, "quantity": int(it.get("quantity", 0)) + 1}
            break
    else:
        items.append({"product_id": product.id, "quantity": 1})
    return _save(db, user, items)


def remove_from_cart(db, user: Dict[str, Any], product_id: str) -> List[Dict[str, Any]]:
    """Drops the line for `product_id`; a product that is not in the cart is a no-op."""
    items = [it for it in _items(user) if it.get("product_id") != product_id]
    return _save(db, user, items)


def clear_cart(db, user: Dict[str, Any]) -> List[Dict[str, Any]]:
    return _save(db, user, [])


def resolve_cart(db, user: Dict[str, Any]) -> List[CartLine]:
    """Cart items with full product details; lines whose product is gone are skipped."""
    lines: List[CartLine] = []
    for it in _items(user):
        pid = str(it.get("product_id", "")).strip()
        qty = int(it.get("quantity", 0) or 0)
        if not pid or qty <= 0:
            continue
        doc = products_repo.get(db, pid)
        if not doc:
            logging.warning("Cart of user %s references missing product %s", user.get("id"), pid)
            continue
        lines.append(CartLine(product=Product.from_doc(doc["id"], doc), quantity=qty))
    return lines


def cart_total(lines: List[CartLine]) -> float:
    total = sum((Decimal(str(line.product.price)) * line.quantity for line in lines), Decimal("0"))
    return float(total.quantize(Decimal("0.01")))
