"""
storefront/core/errors.py - Storefront exception taxonomy.

Services raise these; the handlers registered in `storefront.main` turn them into
re-rendered forms, error pages or redirects.
"""
from functools import wraps
from typing import List, Optional

from google.api_core.exceptions import GoogleAPICallError


class StorefrontError(Exception):
    """Base class for every error the storefront raises on purpose."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Bad form input (or an order placed from an empty cart)."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(StorefrontError):
    pass


class AuthorizationError(StorefrontError):
    pass


class PersistenceError(StorefrontError):
    pass


class PaymentProviderError(StorefrontError):
    pass


class AuthenticationRequired(StorefrontError):
    """A protected page was requested without a logged-in session."""


def persistence_errors(fn):
    """Re-raise Firestore API failures as PersistenceError."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except GoogleAPICallError as exc:
            raise PersistenceError(str(exc)) from exc
    return wrapper
