"""
storefront/services/accounts.py - Signup, login and password reset flows.

E-mails are not sent here: the routers queue them as background tasks so a slow or
failing SMTP server never holds up (or breaks) the response.
"""
from typing import Any, Dict

from storefront.config import settings
from storefront.core.crypto import gen_reset_token, now_ts
from storefront.core.errors import NotFoundError, ValidationError
from storefront.core.security import hash_password, verify_password
from storefront.repositories import users as repo
from storefront.schemas.user import LoginForm, NewPasswordForm, SignupForm


# --- Signup / login ---

def signup(db, form: SignupForm) -> str:
    if repo.find_by_email(db, form.email):
        raise ValidationError("E-Mail exists already, please pick a different one.", ["email"])
    return repo.create(db, form.name, form.email, hash_password(form.password))


def authenticate(db, form: LoginForm) -> Dict[str, Any]:
    user = repo.find_by_email(db, form.email)
    if not user:
        raise ValidationError("E-mail not found.", ["email"])
    if not verify_password(form.password, user.get("password", "")):
        raise ValidationError("Password is incorrect.", ["password"])
    return user


# --- Password reset ---

def start_password_reset(db, email: str) -> str:
    """Stores a fresh one-hour token on the account and returns it."""
    user = repo.find_by_email(db, email)
    if not user:
        raise NotFoundError("No account with that email found.")
    token = gen_reset_token()
    repo.update(db, user["id"], {
        "reset_token": token,
        "reset_token_expiration": now_ts() + settings.reset_token_ttl_seconds,
    })
    return token


def find_reset_user(db, token: str) -> Dict[str, Any]:
    user = repo.find_by_reset_token(db, token) if token else None
    if not user or int(user.get("reset_token_expiration") or 0) <= now_ts():
        raise NotFoundError("Password reset link is invalid or has expired.")
    return user


def complete_password_reset(db, form: NewPasswordForm) -> None:
    user = find_reset_user(db, form.password_token)
    if user["id"] != form.user_id:
        raise NotFoundError("Password reset link is invalid or has expired.")
    repo.update(db, user["id"], {
        "password": hash_password(form.password),
        "reset_token": None,
        "reset_token_expiration": None,
    })


def purge_expired_reset_tokens_once(db) -> int:
    """
    Clears reset tokens whose hour is up.
    Returns the number of users touched.
    """
    changed = 0
    for uid in repo.with_expired_reset_token(db, now_ts()):
        repo.update(db, uid, {"reset_token": None, "reset_token_expiration": None})
        changed += 1
    return changed


# --- E-mail bodies ---

def signup_email() -> Dict[str, str]:
    return {"subject": "Signup succeeded!", "html": "<h1>You successfully signed up!</h1>"}


def reset_email(base_url: str, token: str) -> Dict[str, str]:
    link = f"{base_url.rstrip('/')}/reset/{token}"
    return {
        "subject": "Password reset",
        "html": (
            "<p>You requested a password reset.</p>"
            f'<p>Click this <a href="{link}">link</a> to set a new password.</p>'
        ),
    }
