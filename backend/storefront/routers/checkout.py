"""
# `storefront/routers/checkout.py` — Checkout Documentation

## General
Hosted payment checkout. The cart is turned into payment-provider line items, the
provider opens a session, and the checkout page links the customer to the provider's
payment page. The provider sends the customer back to `/checkout/success`.

---

### `GET /checkout`
1. Cart lines are resolved (empty cart → back to `/cart` with a message).
2. A provider session is created (`PaymentProviderError` → 500 page, no retry).
3. The page shows the lines, the total and the payment link.

### `GET|POST /checkout/success`
1. A `token` (query or form field) is read back from the provider session.
2. The session must be paid, belong to the buyer, match the cart total and not have
   placed an order yet; otherwise → `/checkout/cancel`.
3. The POST callback finds the buyer from the session's basket id when the cookie is
   missing (cross-site POST with `SameSite=Lax`).
4. The order is created from the cart (one order per token) and the cart is cleared.

### `GET /checkout/cancel`
Back to the cart with a message; the cart is left as it was.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from storefront.config import settings
from storefront.core.deps import get_db, get_payment_gateway
from storefront.core.errors import ValidationError
from storefront.core.security import get_current_user, require_user
from storefront.core.templating import flash, render
from storefront.services.cart import resolve_cart
from storefront.services.checkout import confirm_payment, create_checkout_session, on_checkout_success

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.get("")
def get_checkout(
    request: Request,
    user: dict = Depends(require_user),
    db=Depends(get_db),
    gateway=Depends(get_payment_gateway),
):
    lines = resolve_cart(db, user)
    if not lines:
        flash(request, "Your cart is empty.")
        return RedirectResponse("/cart", status_code=303)

    session = create_checkout_session(
        gateway,
        lines,
        success_url=str(request.url_for("checkout_success")),
        cancel_url=str(request.url_for("checkout_cancel")),
        currency=settings.currency,
        customer={
            "id": user["id"],
            "name": user.get("name", ""),
            "email": user.get("email", ""),
            "ip": request.client.host if request.client else "0.0.0.0",
        },
    )
    return render(request, "shop/checkout.html", {
        "page_title": "Checkout",
        "products": lines,
        "total_sum": session.total,
        "session_id": session.session_id,
        "redirect_url": session.redirect_url,
    })


def _checkout_success_impl(request: Request, token: Optional[str], user: Optional[dict], db, gateway):
    payer = confirm_payment(db, gateway, token, user)
    if payer is None:
        return RedirectResponse(str(request.url_for("checkout_cancel")), status_code=303)
    try:
        on_checkout_success(db, payer, payment_token=token)
    except ValidationError as e:
        flash(request, e.message)
        return RedirectResponse("/cart", status_code=303)
    return RedirectResponse("/orders", status_code=303)


@router.get("/success", name="checkout_success")
def get_checkout_success(
    request: Request,
    token: Optional[str] = None,
    user: dict = Depends(require_user),
    db=Depends(get_db),
    gateway=Depends(get_payment_gateway),
):
    return _checkout_success_impl(request, token, user, db, gateway)


@router.post("/success")
def post_checkout_success(
    request: Request,
    token: Optional[str] = Form(None),
    user: Optional[dict] = Depends(get_current_user),
    db=Depends(get_db),
    gateway=Depends(get_payment_gateway),
):
    """
    Provider callback: iyzico's page posts the session token here from another site, so
    the session cookie may be missing and the buyer is then taken from the payment session.
    """
    return _checkout_success_impl(request, token, user, db, gateway)


@router.get("/cancel", name="checkout_cancel")
def get_checkout_cancel(request: Request, user: dict = Depends(require_user)):
    flash(request, "Checkout was cancelled.")
    return RedirectResponse("/cart", status_code=303)
