"""
storefront/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and knows how to initialize the Firebase Admin SDK (Firestore DB) from the provided credentials.
The Firestore client is created lazily by `get_firestore()` so the app can be imported
(and tested) without credentials; routers receive it through `storefront.core.deps.get_db`.
"""
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    firebase_cred_file: str = 'firebase_service_account.json'
    firebase_project_id: Optional[str] = None

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_client_id: Optional[str] = None
    firebase_auth_uri: Optional[str] = None
    firebase_token_uri: Optional[str] = None
    firebase_auth_provider_x509_cert_url: Optional[str] = None
    firebase_client_x509_cert_url: Optional[str] = None

    iyzico_api_key: str = ''
    iyzico_secret_key: str = ''
    iyzico_base_url: str = 'sandbox-api.iyzipay.com'
    currency: str = 'USD'

    debug: bool = False
    allowed_origins: str = '*'  # Comma-separated list or '*' for all
    secret_key: str = 'change-me'    # signs the session cookie
    session_same_site: str = "lax"    # "none" (with https_only) lets the payment callback POST carry the session
    session_https_only: bool = False

    items_per_page: int = 3
    bcrypt_rounds: int = 12
    reset_token_ttl_seconds: int = 3600
    reset_purge_minutes: int = 30
    invoice_dir: str = "data/invoices"

    smtp_host: str = "localhost"
    smtp_port: int = 465
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from: Optional[str] = None
    smtp_use_starttls: bool = False  # true for 587
    mail_from: str = "shop@example.com"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


# Load settings from environment (.env file, etc.)
settings = Settings()


def _credential():
    # Check if we have environment variables for Firebase credentials (Cloud Run)
    if all([
        settings.firebase_private_key_id,
        settings.firebase_private_key,
        settings.firebase_client_email,
        settings.firebase_client_id,
        settings.firebase_auth_uri,
        settings.firebase_token_uri,
        settings.firebase_auth_provider_x509_cert_url,
        settings.firebase_client_x509_cert_url
    ]):
        cred_dict = {
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key_id": settings.firebase_private_key_id,
            "private_key": settings.firebase_private_key,
            "client_email": settings.firebase_client_email,
            "client_id": settings.firebase_client_id,
            "auth_uri": settings.firebase_auth_uri,
            "token_uri": settings.firebase_token_uri,
            "auth_provider_x509_cert_url": settings.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": settings.firebase_client_x509_cert_url
        }
        return credentials.Certificate(cred_dict)
    # Use service account file (local development)
    return credentials.Certificate(settings.firebase_cred_file)


@lru_cache
def get_firestore():
    """Initialize the Firebase Admin SDK once and return the Firestore client."""
    try:
        firebase_admin.initialize_app(_credential(), {'projectId': settings.firebase_project_id})
    except ValueError as e:
        if "already exists" not in str(e):
            raise
        # Firebase app already initialized, reuse the default app
    return firestore.client()
