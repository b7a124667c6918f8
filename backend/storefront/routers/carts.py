"""
storefront/routers/carts.py
Cart pages (logged-in users): show the cart, add one unit of a product, remove a line.

Behavior
- POST /cart looks the product up first (unknown id → 404 page), then adds one unit.
- POST /cart/delete-item removes the line; a product that is not in the cart is ignored.
- GET /cart resolves every line against the catalog and shows the running total.
"""
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from storefront.core.deps import get_db
from storefront.core.security import require_user
from storefront.core.templating import pop_flash, render
from storefront.services import cart as cart_svc
from storefront.services.catalog import get_product

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("")
def get_cart(request: Request, user: dict = Depends(require_user), db=Depends(get_db)):
    lines = cart_svc.resolve_cart(db, user)
    return render(request, "shop/cart.html", {
        "page_title": "Your Cart",
        "products": lines,
        "total_sum": cart_svc.cart_total(lines),
        "error_message": pop_flash(request),
    })


@router.post("")
def post_cart(
    product_id: str = Form(""),
    user: dict = Depends(require_user),
    db=Depends(get_db),
):
    product = get_product(db, product_id.strip())
    cart_svc.add_to_cart(db, user, product)
    return RedirectResponse("/cart", status_code=303)


@router.post("/delete-item")
def post_delete_cart_item(
    product_id: str = Form(""),
    user: dict = Depends(require_user),
    db=Depends(get_db),
):
    cart_svc.remove_from_cart(db, user, product_id.strip())
    return RedirectResponse("/cart", status_code=303)
