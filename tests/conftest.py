from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def invoice_payload() -> dict[str, Any]:
    return {
        "invoiceNumber": "INV-001",
        "invoiceDate": "2024-01-01",
        "dueDate": "2024-01-15",
        "clientName": "Jane Doe",
        "clientEmail": "jane@example.com",
        "items": [
            {"description": "Wedding Package", "quantity": 1, "rate": 2500, "amount": 2500},
        ],
        "subtotal": 2500,
        "total": 2500,
    }


@pytest.fixture
def full_invoice_payload(invoice_payload: dict[str, Any]) -> dict[str, Any]:
    return {
        **invoice_payload,
        "clientPhone": "(808) 555-0142",
        "clientAddress": "12 Kalakaua Ave, Honolulu, HI",
        "items": [
            {"description": "Wedding Package", "quantity": 1, "rate": 2500, "amount": 2500},
            {"description": "Extra Hour", "quantity": 2, "rate": 150, "amount": 300},
            {"description": "Prints", "quantity": 1.5, "rate": 19.5, "amount": 29.25},
        ],
        "subtotal": 2829.25,
        "tax": 117.85,
        "taxRate": 4.166,
        "discount": 100,
        "total": 2847.10,
        "notes": "Deposit received.\nBalance due on delivery.",
        "bookingDetails": {
            "serviceName": "Wedding Photography",
            "bookingDate": "June 14, 2024",
            "location": "Waimea Valley",
        },
    }
