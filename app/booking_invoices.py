from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, timedelta
from typing import Any

from schemas.booking_schema import Booking, InvoiceSummary
from schemas.invoice_schema import BookingDetails, InvoiceLineItem, InvoiceRecord

INVOICEABLE_STATUSES = frozenset({"confirmed", "completed"})
DEFAULT_SERVICE_DESCRIPTION = "Photography Service"
DEFAULT_DUE_DAYS = 30


class NotInvoiceableError(ValueError):
    pass


def _display_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _iso_day(value: str) -> str:
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return text


def booking_invoice_number(booking: Booking) -> str:
    return f"INV-{booking.id}-{booking.date.year}"


def is_invoiceable(booking: Booking) -> bool:
    return booking.status in INVOICEABLE_STATUSES


def invoice_from_booking(
    booking: Booking | Mapping[str, Any],
    *,
    issued_on: date,
    due_in_days: int = DEFAULT_DUE_DAYS,
) -> InvoiceRecord:
    record = booking if isinstance(booking, Booking) else Booking.model_validate(booking)
    if not is_invoiceable(record):
        raise NotInvoiceableError(
            f"Booking {record.id} has status {record.status!r}; only confirmed or completed bookings are invoiced"
        )

    client = record.client
    if client is None or not client.email:
        raise NotInvoiceableError(f"Booking {record.id} has no client email address")
    client_name = client.name or "Unknown Client"
    service_name = (record.service.name if record.service else None) or DEFAULT_SERVICE_DESCRIPTION
    service_price = record.service.price if record.service else 0.0

    items = [
        InvoiceLineItem(description=service_name, quantity=1, rate=service_price, amount=service_price)
    ]
    items.extend(
        InvoiceLineItem(description=add_on.name, quantity=1, rate=add_on.price, amount=add_on.price)
        for add_on in record.add_ons
    )
    subtotal = round(sum(item.amount for item in items), 2)
    session_day = _display_date(record.date.date())

    return InvoiceRecord(
        invoice_number=booking_invoice_number(record),
        invoice_date=issued_on.isoformat(),
        due_date=(issued_on + timedelta(days=due_in_days)).isoformat(),
        client_name=client_name,
        client_email=client.email,
        client_phone=client.phone,
        items=items,
        subtotal=subtotal,
        total=subtotal,
        notes=f"Photography session for {client_name} on {session_day}",
        booking_details=BookingDetails(
            service_name=service_name,
            booking_date=session_day,
            location=record.location or "To be confirmed",
        ),
    )


def invoice_from_summary(summary: InvoiceSummary | Mapping[str, Any]) -> InvoiceRecord:
    row = summary if isinstance(summary, InvoiceSummary) else InvoiceSummary.model_validate(summary)
    return InvoiceRecord(
        invoice_number=row.invoice_number,
        invoice_date=_iso_day(row.created_date),
        due_date=_iso_day(row.due_date),
        client_name=row.client_name,
        client_email=row.client_email,
        items=row.items,
        subtotal=row.amount,
        total=row.amount,
        notes=row.notes or None,
    )
