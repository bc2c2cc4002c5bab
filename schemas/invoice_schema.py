from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Values that end up in email headers must stay on a single line.
SINGLE_LINE_PATTERN = r"^[^\x00-\x1f\x7f]+$"


def reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    return value


class _InvoiceModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class InvoiceLineItem(_InvoiceModel):
    description: str
    quantity: float = Field(allow_inf_nan=False)
    rate: float = Field(allow_inf_nan=False)
    # Displayed as supplied; never recomputed from quantity * rate.
    amount: float = Field(allow_inf_nan=False)

    @field_validator("quantity", "rate", "amount", mode="before")
    @classmethod
    def validate_numbers(cls, v: Any) -> Any:
        return reject_bool(v)


class BookingDetails(_InvoiceModel):
    service_name: str
    booking_date: str
    location: str


class InvoiceRecord(_InvoiceModel):
    invoice_number: str = Field(min_length=1, pattern=SINGLE_LINE_PATTERN)
    invoice_date: str = Field(min_length=1)
    due_date: str = Field(min_length=1)
    client_name: str = Field(min_length=1, pattern=SINGLE_LINE_PATTERN)
    client_email: str = Field(min_length=1, pattern=SINGLE_LINE_PATTERN)
    client_phone: str | None = None
    client_address: str | None = None
    items: list[InvoiceLineItem]
    subtotal: float = Field(allow_inf_nan=False)
    tax: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    tax_rate: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    discount: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    total: float = Field(allow_inf_nan=False)
    notes: str | None = None
    booking_details: BookingDetails | None = None

    @field_validator("subtotal", "tax", "tax_rate", "discount", "total", mode="before")
    @classmethod
    def validate_numbers(cls, v: Any) -> Any:
        return reject_bool(v)
