# storefront/schemas/order.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Product copied by value at order time; later catalog edits do not touch it
class ProductSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    price: float
    description: str = ""
    image_url: str = ""


class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int = Field(..., ge=1)
    product: ProductSnapshot

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class Order(BaseModel):
    """Immutable order record as stored in `orders/{id}`."""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    user_name: str = ""
    user_email: str = ""
    products: List[OrderLine] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    payment_token: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, src: Dict[str, Any]) -> "Order":
        created = src.get("created_at")
        return cls(
            id=doc_id,
            user_id=src.get("user_id", ""),
            user_name=src.get("user_name", "") or "",
            user_email=src.get("user_email", "") or "",
            products=[OrderLine(**p) for p in src.get("products", []) or []],
            created_at=created if isinstance(created, datetime) else None,
            payment_token=src.get("payment_token"),
        )

    @property
    def total(self) -> float:
        return sum(line.line_total for line in self.products)
