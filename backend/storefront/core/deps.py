# storefront/core/deps.py
"""
FastAPI dependencies that build the app's collaborators.
Tests swap any of them through `app.dependency_overrides`.
"""
from storefront.config import get_firestore, settings
from storefront.core.email_utils import SmtpMailer
from storefront.integrations.payment import IyzicoCheckoutGateway
from storefront.services.invoices import InvoiceArchive


def get_db():
    return get_firestore()


def get_payment_gateway() -> IyzicoCheckoutGateway:
    return IyzicoCheckoutGateway(
        api_key=settings.iyzico_api_key,
        secret_key=settings.iyzico_secret_key,
        base_url=settings.iyzico_base_url,
    )


def get_mailer() -> SmtpMailer:
    return SmtpMailer(settings)


def get_invoice_archive() -> InvoiceArchive:
    return InvoiceArchive(settings.invoice_dir)
