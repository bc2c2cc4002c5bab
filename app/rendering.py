"""HTML rendering for client invoices.

The invoice layout lives in ``templates/invoice.html.j2`` and is shared by the
preview endpoint, the PDF path and the CLI. Rendering is a pure function of
the invoice record and the business profile.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

from app.config import BusinessProfile
from schemas.invoice_schema import InvoiceRecord

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
INVOICE_TEMPLATE = "invoice.html.j2"


def _finite(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {type(value).__name__}: {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Cannot format non-finite number: {value!r}")
    return number


def format_money(value: Any) -> str:
    return f"{_finite(value):.2f}"


def format_number(value: Any) -> str:
    number = _finite(value)
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)), "f")


def format_multiline(value: str) -> Markup:
    lines = str(value).splitlines()
    return Markup("<br>\n").join(escape(line) for line in lines)


@lru_cache(maxsize=None)
def template_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html", "html.j2")),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["money"] = format_money
    env.filters["number"] = format_number
    env.filters["multiline"] = format_multiline
    return env


def coerce_invoice(data: InvoiceRecord | Mapping[str, Any]) -> InvoiceRecord:
    if isinstance(data, InvoiceRecord):
        return data
    return InvoiceRecord.model_validate(data)


def generate_invoice_html(
    data: InvoiceRecord | Mapping[str, Any],
    *,
    business: BusinessProfile | None = None,
) -> str:
    """Render ``data`` into a complete, self-contained HTML document.

    Mappings are validated first, so a missing required field or a
    non-numeric amount raises ``pydantic.ValidationError`` before anything
    is rendered. Optional sections (phone, address, tax, discount, booking
    details, notes) are emitted only when their field is truthy.
    """
    invoice = coerce_invoice(data)
    template = template_environment().get_template(INVOICE_TEMPLATE)
    return template.render(invoice=invoice, business=business or BusinessProfile())
