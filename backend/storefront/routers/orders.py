from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, Response

from storefront.core.deps import get_db, get_invoice_archive
from storefront.core.errors import ValidationError
from storefront.core.security import require_user
from storefront.core.templating import flash, render
from storefront.services.invoices import InvoiceArchive, invoice_for
from storefront.services.orders import list_orders, place_order

router = APIRouter(tags=["Orders"])


@router.post("/create-order")
def create_order(request: Request, user: dict = Depends(require_user), db=Depends(get_db)):
    """
    CART → ORDER
    - Cart lines are resolved and frozen into the order.
    - Order write and cart clear are one batch.
    - Empty cart: nothing is written, back to the cart with a message.
    """
    try:
        place_order(db, user)
    except ValidationError as e:
        flash(request, e.message)
        return RedirectResponse("/cart", status_code=303)
    return RedirectResponse("/orders", status_code=303)


@router.get("/orders")
def get_orders(request: Request, user: dict = Depends(require_user), db=Depends(get_db)):
    return render(request, "shop/orders.html", {
        "page_title": "Your Orders",
        "orders": list_orders(db, user["id"]),
    })


@router.get("/orders/{order_id}/invoice")
def get_invoice(
    order_id: str,
    user: dict = Depends(require_user),
    db=Depends(get_db),
    archive: InvoiceArchive = Depends(get_invoice_archive),
):
    """Invoice PDF of one of the user's own orders (also archived on disk)."""
    pdf_bytes = invoice_for(db, order_id, user, archive)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{order_id}.pdf"'},
    )
