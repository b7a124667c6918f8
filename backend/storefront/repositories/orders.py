import hashlib
from typing import Any, Dict, List, Optional

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.core.errors import persistence_errors
from storefront.repositories import users

COL = "orders"


def id_for_payment(token: str) -> str:
    """One order per payment session: the document id is derived from the provider token."""
    return "pay-" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:24]


@persistence_errors
def get(db, order_id: str) -> Optional[Dict[str, Any]]:
    if not order_id or "/" in order_id:
        return None
    doc = db.collection(COL).document(order_id).get()
    return {**(doc.to_dict() or {}), "id": doc.id} if doc.exists else None


@persistence_errors
def list_for_user(db, uid: str) -> List[Dict[str, Any]]:
    q = db.collection(COL).where(filter=FieldFilter("user_id", "==", uid)).stream()
    return [{**(d.to_dict() or {}), "id": d.id} for d in q]


@persistence_errors
def find_by_payment_token(db, token: str) -> Optional[Dict[str, Any]]:
    q = db.collection(COL).where(filter=FieldFilter("payment_token", "==", token)).limit(1).stream()
    snap = next(q, None)
    return {**(snap.to_dict() or {}), "id": snap.id} if snap else None


@persistence_errors
def create_and_clear_cart(db, uid: str, order_doc: Dict[str, Any], order_id: Optional[str] = None) -> str:
    """
    Writes the order and empties the owner's cart in one batch (all or nothing).
    With `order_id` the order is created, not overwritten: an existing id fails the batch.
    """
    col = db.collection(COL)
    order_ref = col.document(order_id) if order_id else col.document()
    doc = {**order_doc, "created_at": gcf.SERVER_TIMESTAMP}
    batch = db.batch()
    if order_id:
        batch.create(order_ref, doc)
    else:
        batch.set(order_ref, doc)
    batch.update(db.collection(users.COL).document(uid), {"cart": {"items": []}})
    batch.commit()
    return order_ref.id
