from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from pydantic import ValidationError

from app.booking_invoices import (
    NotInvoiceableError,
    invoice_from_booking,
    invoice_from_summary,
    is_invoiceable,
)
from app.rendering import generate_invoice_html
from schemas.booking_schema import Booking


def _booking(**overrides: Any) -> dict[str, Any]:
    booking = {
        "id": 42,
        "date": "2024-06-14T16:00:00Z",
        "status": "confirmed",
        "location": "Waimea Valley",
        "addOns": [{"id": "drone", "name": "Drone Coverage", "price": 350}],
        "client": {"name": "Jane Doe", "email": "jane@example.com", "phone": "808-555-0142"},
        "service": {"name": "Wedding Photography", "price": "2500.00"},
        "createdAt": "2024-05-01T09:30:00Z",
    }
    booking.update(overrides)
    return booking


def test_invoice_from_booking_builds_complete_record() -> None:
    invoice = invoice_from_booking(_booking(), issued_on=date(2024, 6, 20))

    assert invoice.invoice_number == "INV-42-2024"
    assert invoice.invoice_date == "2024-06-20"
    assert invoice.due_date == "2024-07-20"
    assert invoice.client_name == "Jane Doe"
    assert invoice.client_phone == "808-555-0142"
    assert [(i.description, i.amount) for i in invoice.items] == [
        ("Wedding Photography", 2500.0),
        ("Drone Coverage", 350.0),
    ]
    assert invoice.subtotal == invoice.total == 2850.0
    assert invoice.booking_details is not None
    assert invoice.booking_details.booking_date == "June 14, 2024"
    assert invoice.booking_details.location == "Waimea Valley"
    assert invoice.notes == "Photography session for Jane Doe on June 14, 2024"


def test_invoice_from_booking_honours_due_days() -> None:
    invoice = invoice_from_booking(_booking(), issued_on=date(2024, 1, 31), due_in_days=14)
    assert invoice.due_date == "2024-02-14"


def test_invoice_from_booking_defaults_missing_service_and_location() -> None:
    invoice = invoice_from_booking(
        _booking(service=None, location=None, addOns=[]), issued_on=date(2024, 6, 20)
    )
    assert invoice.items[0].description == "Photography Service"
    assert invoice.total == 0.0
    assert invoice.booking_details is not None
    assert invoice.booking_details.location == "To be confirmed"


@pytest.mark.parametrize("status", ["pending", "cancelled"])
def test_only_confirmed_or_completed_bookings_are_invoiced(status: str) -> None:
    assert not is_invoiceable(Booking.model_validate(_booking(status=status)))
    with pytest.raises(NotInvoiceableError, match=status):
        invoice_from_booking(_booking(status=status), issued_on=date(2024, 6, 20))


def test_booking_without_client_email_is_not_invoiceable() -> None:
    with pytest.raises(NotInvoiceableError, match="email"):
        invoice_from_booking(_booking(client={"name": "Jane"}), issued_on=date(2024, 6, 20))


def test_booking_with_unknown_status_is_rejected() -> None:
    with pytest.raises(ValidationError):
        invoice_from_booking(_booking(status="archived"), issued_on=date(2024, 6, 20))


def test_booking_invoice_renders() -> None:
    html = generate_invoice_html(invoice_from_booking(_booking(), issued_on=date(2024, 6, 20)))
    assert "INV-42-2024" in html
    assert "Drone Coverage" in html
    assert "$2850.00" in html
    assert "Location: Waimea Valley" in html


def test_invoice_from_summary_maps_admin_row() -> None:
    invoice = invoice_from_summary(
        {
            "invoiceNumber": "INV-42-2024",
            "createdDate": "2024-06-20T10:15:00.000Z",
            "dueDate": "2024-07-20T10:15:00.000Z",
            "clientName": "Jane Doe",
            "clientEmail": "jane@example.com",
            "amount": 2500,
            "items": [{"description": "Wedding Photography", "quantity": 1, "rate": 2500, "amount": 2500}],
            "notes": "",
        }
    )
    assert invoice.invoice_date == "2024-06-20"
    assert invoice.due_date == "2024-07-20"
    assert invoice.subtotal == invoice.total == 2500
    assert invoice.notes is None
    assert invoice.tax is None


def test_invoice_from_summary_keeps_display_dates() -> None:
    invoice = invoice_from_summary(
        {
            "invoiceNumber": "INV-7",
            "createdDate": "June 20, 2024",
            "dueDate": "July 20, 2024",
            "clientName": "Kai",
            "clientEmail": "kai@example.com",
        }
    )
    assert invoice.invoice_date == "June 20, 2024"
    assert invoice.items == []
    assert invoice.total == 0


@pytest.mark.parametrize(
    "client",
    [
        {"name": "Jane\nBcc: x@evil.test", "email": "jane@example.com"},
        {"name": "Jane", "email": "jane@example.com\r\nBcc: x@evil.test"},
    ],
)
def test_booking_client_fields_must_be_single_line(client: dict[str, Any]) -> None:
    with pytest.raises(ValidationError):
        invoice_from_booking(_booking(client=client), issued_on=date(2024, 6, 20))


def test_booking_prices_reject_booleans() -> None:
    with pytest.raises(ValidationError):
        Booking.model_validate(_booking(service={"name": "Portraits", "price": True}))
