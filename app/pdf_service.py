from __future__ import annotations

from collections.abc import Mapping
from io import BytesIO
from typing import Any

from xhtml2pdf import pisa

from app.config import BusinessProfile
from app.rendering import generate_invoice_html
from schemas.invoice_schema import InvoiceRecord


class PdfGenerationError(RuntimeError):
    pass


def html_to_pdf(html_content: str) -> bytes:
    pdf_buffer = BytesIO()
    result = pisa.CreatePDF(src=html_content, dest=pdf_buffer, encoding="utf-8")
    if result.err:
        raise PdfGenerationError(f"Failed to generate PDF ({result.err} conversion error(s))")
    return pdf_buffer.getvalue()


def generate_invoice_pdf(
    data: InvoiceRecord | Mapping[str, Any],
    *,
    business: BusinessProfile | None = None,
) -> bytes:
    return html_to_pdf(generate_invoice_html(data, business=business))
