from __future__ import annotations

import logging
import time
from datetime import date
from email.message import EmailMessage
from typing import Any, Protocol

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.booking_invoices import NotInvoiceableError, invoice_from_booking, invoice_from_summary
from app.config import Settings
from app.document_store import DocumentStore, build_document_store, invoice_filename
from app.email_service import DeliveryError, SmtpMailer, compose_invoice_email, payment_link
from app.logger import log_invoice_event
from app.metrics import MetricsCollector
from app.pdf_service import PdfGenerationError, html_to_pdf
from app.rendering import generate_invoice_html
from schemas.booking_schema import Booking, InvoiceSummary
from schemas.invoice_schema import InvoiceRecord

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, message: EmailMessage) -> None:
        ...


class SendInvoiceRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    invoice: InvoiceRecord
    include_payment_link: bool = False


class SendInvoiceResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    payment_link: str | None = None


class BookingInvoiceRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    booking: Booking
    issued_on: date | None = None
    due_in_days: int = Field(default=30, ge=0)


def create_invoice_app(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    mailer: Mailer | None = None,
    metrics: MetricsCollector | None = None,
) -> FastAPI:
    active = settings or Settings()
    business = active.business
    documents = store or build_document_store(active)
    counters = metrics or MetricsCollector()
    app = FastAPI(title="Studio Invoice API", version="0.1.0")

    def _render(invoice: InvoiceRecord) -> str:
        started = time.perf_counter()
        html = generate_invoice_html(invoice, business=business)
        latency_ms = int((time.perf_counter() - started) * 1000)
        counters.increment("invoices_rendered_total")
        counters.observe_latency(latency_ms)
        log_invoice_event(
            logger,
            logging.INFO,
            "Invoice rendered",
            invoice_number=invoice.invoice_number,
            stage="render",
            latency_ms=latency_ms,
            outcome="success",
        )
        return html

    def _pdf(invoice: InvoiceRecord) -> bytes:
        try:
            pdf = html_to_pdf(_render(invoice))
        except PdfGenerationError as exc:
            counters.increment("invoices_failed_total")
            logger.exception("PDF generation failed for invoice=%s", invoice.invoice_number)
            raise HTTPException(status_code=500, detail="Failed to generate PDF") from exc
        counters.increment("pdfs_generated_total")
        return pdf

    def _matching(invoice_number: str, invoice: InvoiceRecord) -> InvoiceRecord:
        if invoice.invoice_number != invoice_number:
            raise HTTPException(
                status_code=400,
                detail=f"Invoice number {invoice.invoice_number!r} does not match path {invoice_number!r}",
            )
        return invoice

    def _mailer() -> Mailer:
        if mailer is not None:
            return mailer
        try:
            return SmtpMailer.from_settings(active)
        except ValueError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/stats")
    def stats() -> dict[str, Any]:
        return counters.snapshot()

    @app.post("/invoices/preview", response_class=HTMLResponse)
    def preview_invoice(invoice: InvoiceRecord) -> HTMLResponse:
        return HTMLResponse(_render(invoice))

    @app.post("/invoices/pdf/{invoice_number}")
    def download_invoice_pdf(invoice_number: str, invoice: InvoiceRecord) -> Response:
        invoice = _matching(invoice_number, invoice)
        pdf = _pdf(invoice)
        location = documents.save(invoice.invoice_number, "pdf", pdf)
        log_invoice_event(
            logger,
            logging.INFO,
            f"Invoice PDF stored at {location}",
            invoice_number=invoice.invoice_number,
            stage="storage",
            outcome="success",
        )
        filename = invoice_filename(invoice.invoice_number, "pdf")
        return Response(
            content=pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/invoices/send/{invoice_number}", response_model=SendInvoiceResponse)
    def send_invoice(invoice_number: str, request: SendInvoiceRequest) -> SendInvoiceResponse:
        invoice = _matching(invoice_number, request.invoice)
        link = payment_link(active.payment_link_base_url, invoice_number) if request.include_payment_link else None
        message = compose_invoice_email(
            invoice,
            business=business,
            from_address=active.email_from_address,
            attachment=_pdf(invoice),
            link=link,
        )
        try:
            _mailer().send(message)
        except DeliveryError as exc:
            counters.increment("emails_failed_total")
            log_invoice_event(
                logger,
                logging.ERROR,
                "Invoice email failed",
                invoice_number=invoice.invoice_number,
                stage="delivery",
                outcome="failed",
                recipient=invoice.client_email,
            )
            raise HTTPException(status_code=502, detail="Failed to send invoice email") from exc

        counters.increment("emails_sent_total")
        log_invoice_event(
            logger,
            logging.INFO,
            "Invoice email sent",
            invoice_number=invoice.invoice_number,
            stage="delivery",
            outcome="success",
            recipient=invoice.client_email,
        )
        return SendInvoiceResponse(
            success=True,
            message=f"Invoice {invoice_number} sent successfully to {invoice.client_email}",
            payment_link=link,
        )

    @app.post("/invoices/from-booking")
    def booking_invoice(request: BookingInvoiceRequest = Body(...)) -> dict[str, Any]:
        try:
            invoice = invoice_from_booking(
                request.booking,
                issued_on=request.issued_on or date.today(),
                due_in_days=request.due_in_days,
            )
        except NotInvoiceableError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return invoice.model_dump(mode="json", by_alias=True)

    @app.post("/invoices/from-summary")
    def summary_invoice(summary: InvoiceSummary) -> dict[str, Any]:
        return invoice_from_summary(summary).model_dump(mode="json", by_alias=True)

    return app
