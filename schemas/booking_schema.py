from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from schemas.invoice_schema import SINGLE_LINE_PATTERN, InvoiceLineItem, reject_bool

_OPTIONAL_LINE_PATTERN = r"^[^\x00-\x1f\x7f]*$"


class _BookingModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingClient(_BookingModel):
    name: str | None = Field(default=None, pattern=_OPTIONAL_LINE_PATTERN)
    email: str | None = Field(default=None, pattern=_OPTIONAL_LINE_PATTERN)
    phone: str | None = None


class BookingService(_BookingModel):
    name: str | None = None
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Any:
        return reject_bool(v)


class BookingAddOn(_BookingModel):
    id: str | None = None
    name: str
    price: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Any:
        return reject_bool(v)


class Booking(_BookingModel):
    id: int
    date: datetime
    status: Literal["pending", "confirmed", "completed", "cancelled"] = "pending"
    location: str | None = None
    notes: str | None = None
    add_ons: list[BookingAddOn] = Field(default_factory=list)
    client: BookingClient | None = None
    service: BookingService | None = None
    created_at: datetime | None = None


class InvoiceSummary(_BookingModel):
    """Row shape used by the admin invoice list."""

    invoice_number: str = Field(min_length=1, pattern=SINGLE_LINE_PATTERN)
    created_date: str
    due_date: str
    client_name: str = Field(min_length=1, pattern=SINGLE_LINE_PATTERN)
    client_email: str = Field(min_length=1, pattern=SINGLE_LINE_PATTERN)
    amount: float = Field(default=0.0, allow_inf_nan=False)
    items: list[InvoiceLineItem] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        return reject_bool(v)
