from typing import Any, Dict, List, Optional

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.core.errors import persistence_errors

COL = "users"


def _first(q) -> Optional[Dict[str, Any]]:
    snap = next(q.limit(1).stream(), None)
    return {**(snap.to_dict() or {}), "id": snap.id} if snap else None


@persistence_errors
def get(db, uid: str) -> Optional[Dict[str, Any]]:
    if not uid or "/" in uid:
        return None
    doc = db.collection(COL).document(uid).get()
    return {**(doc.to_dict() or {}), "id": doc.id} if doc.exists else None


@persistence_errors
def find_by_email(db, email: str) -> Optional[Dict[str, Any]]:
    return _first(db.collection(COL).where(filter=FieldFilter("email", "==", email)))


@persistence_errors
def find_by_reset_token(db, token: str) -> Optional[Dict[str, Any]]:
    return _first(db.collection(COL).where(filter=FieldFilter("reset_token", "==", token)))


@persistence_errors
def create(db, name: str, email: str, password_hash: str) -> str:
    ref = db.collection(COL).document()
    ref.set({
        "name": name,
        "email": email,
        "password": password_hash,
        "cart": {"items": []},
        "reset_token": None,
        "reset_token_expiration": None,
        "created_at": gcf.SERVER_TIMESTAMP,
    })
    return ref.id


@persistence_errors
def update(db, uid: str, patch: Dict[str, Any]) -> None:
    db.collection(COL).document(uid).update(patch)


@persistence_errors
def save_cart(db, uid: str, items: List[Dict[str, Any]]) -> None:
    db.collection(COL).document(uid).update({"cart": {"items": items}})


@persistence_errors
def with_expired_reset_token(db, now_unix: int) -> List[str]:
    q = db.collection(COL).where(filter=FieldFilter("reset_token_expiration", "<", now_unix))
    return [d.id for d in q.stream()]
