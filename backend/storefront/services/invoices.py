# storefront/services/invoices.py
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from storefront.core.errors import AuthorizationError
from storefront.schemas.order import Order
from storefront.services.orders import get_order

MARGIN = 50
FOOTER = "Payment is due within 15 days. Thank you for your business."


def money(amount: float) -> str:
    return f"${amount:.2f}"


def invoice_lines(order: Order) -> List[str]:
    return [
        f"{line.product.title} - {line.quantity} x {money(line.product.price)}"
        for line in order.products
    ]


def render_invoice(order: Order) -> bytes:
    """Invoice PDF: title, one row per product, total, payment terms."""
    buf = io.BytesIO()
    width, height = A4
    pdf = canvas.Canvas(buf, pagesize=A4, pageCompression=0)
    pdf.setTitle(f"Invoice {order.id}")

    y = height - MARGIN - 26
    pdf.setFont("Helvetica", 26)
    pdf.drawString(MARGIN, y, "Invoice")
    pdf.line(MARGIN, y - 4, MARGIN + pdf.stringWidth("Invoice", "Helvetica", 26), y - 4)
    y -= 40

    pdf.setFont("Helvetica", 14)
    for text in invoice_lines(order):
        if y < MARGIN + 60:
            pdf.showPage()
            pdf.setFont("Helvetica", 14)
            y = height - MARGIN
        pdf.drawString(MARGIN, y, text)
        y -= 24

    y -= 10
    pdf.setFont("Helvetica", 20)
    pdf.drawRightString(width - MARGIN, y, f"Total Price: {money(order.total)}")
    y -= 30
    pdf.setFont("Helvetica", 10)
    pdf.drawCentredString(width / 2, y, FOOTER)

    pdf.showPage()
    pdf.save()
    return buf.getvalue()


class InvoiceArchive:
    """Keeps a copy of every generated invoice under `directory/<order_id>.pdf`."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, order_id: str) -> Path:
        return self.directory / f"{order_id}.pdf"

    def save(self, order_id: str, pdf_bytes: bytes) -> Optional[Path]:
        """Best-effort: a failed write is logged and reported as None."""
        path = self.path_for(order_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(pdf_bytes)
        except OSError:
            logging.exception("Invoice archive write failed for order %s", order_id)
            return None
        return path


def invoice_for(db, order_id: str, user: Dict[str, Any], archive: InvoiceArchive) -> bytes:
    """
    Renders the invoice of `order_id` for its owner.
    - unknown order → NotFoundError
    - someone else's order → AuthorizationError, nothing rendered
    The PDF goes to the archive and back to the caller for the response.
    """
    order = get_order(db, order_id)
    if order.user_id != user["id"]:
        raise AuthorizationError("Unauthorized.")
    pdf_bytes = render_invoice(order)
    archive.save(order.id, pdf_bytes)
    return pdf_bytes
