# storefront/services/catalog.py
from __future__ import annotations

import math
from typing import Any

from storefront.core.errors import NotFoundError
from storefront.repositories import products as repo
from storefront.schemas.product import Pagination, Product, ProductPage


def parse_page(raw: Any) -> int:
    """`?page=` value → 1-indexed page; anything unusable falls back to 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def paginate(page: int, page_size: int, total_items: int) -> Pagination:
    return Pagination(
        current_page=page,
        has_next_page=page_size * page < total_items,
        has_previous_page=page > 1,
        next_page=page + 1,
        previous_page=page - 1,
        last_page=math.ceil(total_items / page_size),
    )


def list_products(db, page: int, page_size: int) -> ProductPage:
    """
    One page of the catalog in insertion order.
    A page past the end yields an empty list, not an error, and is not queried.
    """
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    total_items = repo.count(db)
    offset = (page - 1) * page_size
    docs = repo.page(db, offset=offset, limit=page_size) if offset < total_items else []
    return ProductPage(
        products=[Product.from_doc(d["id"], d) for d in docs],
        pagination=paginate(page, page_size, total_items),
        total_items=total_items,
    )


def get_product(db, product_id: str) -> Product:
    doc = repo.get(db, product_id)
    if not doc:
        raise NotFoundError("Product not found")
    return Product.from_doc(doc["id"], doc)
