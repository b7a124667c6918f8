"""
# `storefront/schemas/product.py` — Product Schema Documentation

## Product
A catalog entry as shown on the listing and detail pages.

| Field       | Type    | Description |
|-------------|---------|-------------|
| id          | `str`   | Firestore document id |
| title       | `str`   | Product title |
| price       | `float` | Unit price (>= 0) |
| description | `str`   | Long description |
| image_url   | `str`   | Image shown on cards and the detail page |

## Pagination / ProductPage
One page of the catalog plus the navigation flags the templates need.

| Field             | Type   | Rule |
|-------------------|--------|------|
| current_page      | `int`  | 1-indexed |
| has_next_page     | `bool` | `page_size * page < total_items` |
| has_previous_page | `bool` | `page > 1` |
| next_page         | `int`  | `page + 1` |
| previous_page     | `int`  | `page - 1` |
| last_page         | `int`  | `ceil(total_items / page_size)` |
"""
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: str
    title: str
    price: float = Field(..., ge=0, description="Price of the product")
    description: str = ""
    image_url: str = ""

    @classmethod
    def from_doc(cls, doc_id: str, src: Dict[str, Any]) -> "Product":
        return cls(
            id=doc_id,
            title=src.get("title", ""),
            price=float(src.get("price", 0) or 0),
            description=src.get("description", "") or "",
            image_url=src.get("image_url", "") or "",
        )


class Pagination(BaseModel):
    current_page: int
    has_next_page: bool
    has_previous_page: bool
    next_page: int
    previous_page: int
    last_page: int


class ProductPage(BaseModel):
    products: List[Product] = Field(default_factory=list)
    pagination: Pagination
    total_items: int
