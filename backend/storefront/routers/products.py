"""
# `storefront/routers/products.py` — Catalog Pages Documentation

## General
Public catalog pages: the shop index, the paginated product list and the product
detail page. Products are read from the Firestore `products` collection.

---

### `GET /`
**Purpose:** Shop landing page, same paginated listing as `/products`.

### `GET /products?page=`
**Purpose:** Paginated product list (`settings.items_per_page` per page).

**Flow:**
1. `page` is parsed leniently (missing / invalid / < 1 → 1).
2. Total count and one page of products (insertion order) are read.
3. A page past the end renders an empty list with working navigation.

### `GET /products/{product_id}`
**Purpose:** Product detail page. Unknown id → 404 error page.
"""
from fastapi import APIRouter, Depends, Request

from storefront.config import settings
from storefront.core.deps import get_db
from storefront.core.templating import render
from storefront.services.catalog import get_product, list_products, parse_page

router = APIRouter(tags=["Products"])


def _listing(request: Request, db, template: str, title: str):
    page = parse_page(request.query_params.get("page"))
    result = list_products(db, page, settings.items_per_page)
    return render(request, template, {
        "prods": result.products,
        "page_title": title,
        "pagination": result.pagination,
    })


@router.get("/", summary="Shop index")
def get_index(request: Request, db=Depends(get_db)):
    return _listing(request, db, "shop/index.html", "Shop")


@router.get("/products", summary="List Products")
def get_products(request: Request, db=Depends(get_db)):
    return _listing(request, db, "shop/product-list.html", "All Products")


@router.get("/products/{product_id}", summary="Get Product")
def get_product_detail(product_id: str, request: Request, db=Depends(get_db)):
    product = get_product(db, product_id)
    return render(request, "shop/product-detail.html", {
        "product": product,
        "page_title": product.title,
    })
