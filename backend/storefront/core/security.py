"""
# `storefront/core/security.py` — Security & Session Identity Documentation

This module holds password hashing and the FastAPI dependencies that resolve the
logged-in user from the signed session cookie. Use them with `Depends(...)` in routers.

---

## Overview

- **Password hashing:** bcrypt with a configurable cost factor (`settings.bcrypt_rounds`).
- **Session:** Starlette `SessionMiddleware` stores `user_id` and `is_logged_in`. Logging
  out clears the whole session.
- **Fetching the user:** `get_current_user` reads `users/{user_id}` from Firestore and
  returns it as a dict with `id`, or `None` for anonymous visitors.
- **Protected pages:** `require_user` raises `AuthenticationRequired`; the app turns it
  into a redirect to `/login`.

---

## Functions

### `hash_password(plain, rounds=None) -> str`
bcrypt hash as text.

### `verify_password(plain, hashed) -> bool`
`False` for a mismatch or for a stored value that is not a bcrypt hash.

### `login_session(request, user_id)` / `logout_session(request)`
Write / destroy the session.

### `get_current_user(request, db) -> Optional[dict]`
```json
{
  "id": "firestore_doc_id",
  "name": "Ada",
  "email": "ada@example.com",
  "cart": {"items": [{"product_id": "p1", "quantity": 2}]}
}
```
"""
from typing import Dict, Optional

import bcrypt
from fastapi import Depends, Request

from storefront.config import settings
from storefront.core.deps import get_db
from storefront.core.errors import AuthenticationRequired
from storefront.repositories import users as users_repo


def hash_password(plain: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def login_session(request: Request, user_id: str) -> None:
    request.session["user_id"] = user_id
    request.session["is_logged_in"] = True


def logout_session(request: Request) -> None:
    request.session.clear()


def is_logged_in(request: Request) -> bool:
    # error pages rendered outside the session middleware have no session
    if "session" not in request.scope:
        return False
    return bool(request.session.get("is_logged_in"))


def get_current_user(request: Request, db=Depends(get_db)) -> Optional[Dict]:
    """
    Session → user dict (with `id`). Anonymous visitors get None.
    A session pointing at a deleted user is dropped.
    """
    uid = request.session.get("user_id")
    if not uid or not is_logged_in(request):
        return None
    user = users_repo.get(db, uid)
    if not user:
        logout_session(request)
        return None
    return user


def require_user(user: Optional[Dict] = Depends(get_current_user)) -> Dict:
    """Dependency for pages that need a logged-in user."""
    if user is None:
        raise AuthenticationRequired("Login required")
    return user
