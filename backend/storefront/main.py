"""
# `storefront/main.py` — Application Documentation

## General
Entry point of the FastAPI application. Routers are included, session and CORS
middleware are configured, storefront errors are mapped to pages, and the background
scheduler is set up.

---

## Application Setup
- `FastAPI` instance (`title`, `description`, `version`), `redirect_slashes=False`.
- `SessionMiddleware` signs the session cookie with `settings.secret_key`.
- CORS is configured from `settings.allowed_origins` (list or `*`).

---

## Routers
- `/`, `/products` — catalog
- `/cart` — cart
- `/create-order`, `/orders` — orders and invoices
- `/checkout` — payment checkout
- `/login`, `/signup`, `/logout`, `/reset`, `/new-password` — auth

---

## Error Mapping
| Error | Response |
|-------|----------|
| `AuthenticationRequired` | 303 → `/login` |
| `NotFoundError`, `AuthorizationError` | 404 page (owner mismatch looks like a missing order) |
| `ValidationError` (not handled by a form) | 422 error page |
| `PersistenceError`, `PaymentProviderError`, anything else | 500 page |

---

## Background Scheduler
- **Library:** APScheduler (`AsyncIOScheduler`)
- **Job:** `purge_expired_reset_tokens_once` (clears expired password reset tokens)
- **Period:** every `settings.reset_purge_minutes` minutes

**Events:**
- `startup`: scheduler is started.
- `shutdown`: scheduler is shut down.
"""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from storefront.config import settings
from storefront.core.deps import get_db
from storefront.core.errors import (
    AuthenticationRequired,
    AuthorizationError,
    NotFoundError,
    PaymentProviderError,
    PersistenceError,
    ValidationError,
)
from storefront.core.templating import render
from storefront.routers import auth, carts, checkout, orders, products
from storefront.services.accounts import purge_expired_reset_tokens_once

# single scheduler for the app process
scheduler = AsyncIOScheduler()


def _purge_reset_tokens_job():
    changed = purge_expired_reset_tokens_once(get_db())
    if changed:
        logging.info("Cleared %d expired password reset token(s)", changed)


# Initialize FastAPI app
app = FastAPI(
    title="Storefront",
    description="Server-rendered shop: catalog, cart, orders, invoices and checkout.",
    version="1.0.0",
    redirect_slashes=False
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    same_site=settings.session_same_site,
    https_only=settings.session_https_only,
)

# Configure CORS (allow front-end domain or all origins as specified)
allow_origins = [origin.strip() for origin in settings.allowed_origins.split(',')] if settings.allowed_origins else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products.router)
app.include_router(carts.router)
app.include_router(orders.router)
app.include_router(checkout.router)
app.include_router(auth.router)


# --------------------------------------------------------------------------- #
# Error pages
# --------------------------------------------------------------------------- #
@app.exception_handler(AuthenticationRequired)
async def _login_required(request: Request, exc: AuthenticationRequired):
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(NotFoundError)
@app.exception_handler(AuthorizationError)
async def _not_found(request: Request, exc):
    return render(request, "errors/404.html", {"page_title": "Page Not Found"}, status_code=404)


@app.exception_handler(ValidationError)
async def _invalid(request: Request, exc: ValidationError):
    return render(request, "errors/error.html", {
        "page_title": "Invalid Request",
        "error_message": exc.message,
    }, status_code=422)


@app.exception_handler(PersistenceError)
@app.exception_handler(PaymentProviderError)
async def _server_error(request: Request, exc):
    logging.error("Request %s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return render(request, "errors/500.html", {"page_title": "Error!"}, status_code=500)


@app.exception_handler(Exception)
async def _unexpected(request: Request, exc: Exception):
    logging.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return render(request, "errors/500.html", {"page_title": "Error!"}, status_code=500)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return render(request, "errors/404.html", {"page_title": "Page Not Found"}, status_code=404)
    return await http_exception_handler(request, exc)


@app.on_event("startup")
async def _startup_scheduler():
    if not scheduler.running:
        scheduler.start()
    # same id on restart replaces the job
    scheduler.add_job(
        _purge_reset_tokens_job,
        "interval",
        minutes=settings.reset_purge_minutes,
        id="reset-token-purge",
        replace_existing=True,
    )


@app.on_event("shutdown")
async def _shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
