from typing import Any, Dict, List, Optional

from google.cloud import firestore as gcf

from storefront.core.errors import persistence_errors

COL = "products"


def _valid_id(doc_id: str) -> bool:
    return bool(doc_id) and "/" not in doc_id


@persistence_errors
def count(db) -> int:
    results = db.collection(COL).count().get()
    return int(results[0][0].value)


@persistence_errors
def page(db, offset: int, limit: int) -> List[Dict[str, Any]]:
    q = (
        db.collection(COL)
          .order_by("created_at")
          .offset(offset)
          .limit(limit)
          .stream()
    )
    return [{**(d.to_dict() or {}), "id": d.id} for d in q]


@persistence_errors
def get(db, product_id: str) -> Optional[Dict[str, Any]]:
    if not _valid_id(product_id):
        return None
    doc = db.collection(COL).document(product_id).get()
    return {**(doc.to_dict() or {}), "id": doc.id} if doc.exists else None


@persistence_errors
def create(db, title: str, price: float, description: str = "", image_url: str = "") -> str:
    ref = db.collection(COL).document()
    ref.set({
        "title": title,
        "price": price,
        "description": description,
        "image_url": image_url,
        "created_at": gcf.SERVER_TIMESTAMP,
    })
    return ref.id
