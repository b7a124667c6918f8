#!/usr/bin/env python3
"""
Loads catalog products into Firestore from a JSON file.

File format: a list of objects with `title`, `price`, `description`, `image_url`.
"""

import json
import sys

from storefront.config import get_firestore
from storefront.repositories import products as products_repo


def seed_products(path: str) -> int:
    """Adds every product in `path`; returns how many were written."""

    with open(path, encoding="utf-8") as fh:
        items = json.load(fh)
    if not isinstance(items, list):
        raise ValueError("Expected a JSON list of products")

    db = get_firestore()
    print("✅ Firestore client ready")

    written = 0
    for item in items:
        product_id = products_repo.create(
            db,
            title=item["title"],
            price=float(item["price"]),
            description=item.get("description", ""),
            image_url=item.get("image_url", ""),
        )
        print(f"✅ {product_id} - {item['title']}")
        written += 1
    return written


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python seed_products.py <products.json>")
        sys.exit(1)

    try:
        count = seed_products(sys.argv[1])
    except (OSError, ValueError, KeyError) as e:
        print(f"💥 Seeding failed: {e}")
        sys.exit(1)
    print(f"🎉 {count} product(s) added")
