from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

from app.config import BusinessProfile, Settings
from app.document_store import invoice_filename
from app.rendering import generate_invoice_html, template_environment
from schemas.invoice_schema import InvoiceRecord

logger = logging.getLogger(__name__)

EMAIL_TEMPLATE = "invoice_email.txt.j2"


class DeliveryError(RuntimeError):
    pass


def payment_link(base_url: str, invoice_number: str) -> str:
    return f"{base_url.rstrip('/')}/invoice/{invoice_number}"


def invoice_subject(invoice: InvoiceRecord, business: BusinessProfile) -> str:
    return f"Invoice {invoice.invoice_number} from {business.name}"


def compose_invoice_email(
    invoice: InvoiceRecord,
    *,
    business: BusinessProfile,
    from_address: str,
    attachment: bytes | None = None,
    link: str | None = None,
) -> EmailMessage:
    body = template_environment().get_template(EMAIL_TEMPLATE).render(
        invoice=invoice,
        business=business,
        payment_link=link,
    )

    message = EmailMessage()
    message["Subject"] = invoice_subject(invoice, business)
    message["From"] = from_address
    message["To"] = formataddr((invoice.client_name, invoice.client_email))
    message.set_content(body)
    message.add_alternative(generate_invoice_html(invoice, business=business), subtype="html")
    if attachment is not None:
        message.add_attachment(
            attachment,
            maintype="application",
            subtype="pdf",
            filename=invoice_filename(invoice.invoice_number, "pdf"),
        )
    return message


@dataclass(frozen=True)
class SmtpMailer:
    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None
    use_ssl: bool = False
    timeout_seconds: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        if not settings.smtp_host:
            raise ValueError("SMTP_HOST is required to send invoice emails")
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_ssl=settings.smtp_use_ssl or settings.smtp_port == 465,
        )

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout_seconds)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds)
        server.starttls(context=context)
        return server

    def send(self, message: EmailMessage) -> None:
        try:
            with self._connect() as server:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery to %s failed: %s", message["To"], exc)
            raise DeliveryError(f"Failed to send email to {message['To']}") from exc
