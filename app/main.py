from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path

from pydantic import ValidationError

from app.config import Settings, load_dotenv
from app.document_store import build_document_store, invoice_filename
from app.logger import configure_logging, log_invoice_event
from app.pdf_service import PdfGenerationError, generate_invoice_pdf
from app.rendering import generate_invoice_html
from schemas.invoice_schema import InvoiceRecord

logger = logging.getLogger(__name__)


def _load_invoice(path: Path) -> InvoiceRecord:
    payload = json.loads(path.read_text(encoding="utf-8"))
    return InvoiceRecord.model_validate(payload)


def run_render(input_path: str | Path, *, output_format: str = "html", output: str | Path | None = None) -> int:
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        invoice = _load_invoice(Path(input_path))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not read invoice input %s: %s", input_path, exc)
        return 1
    except ValidationError as exc:
        logger.error("Invoice input %s is invalid: %s", input_path, exc)
        return 1

    started = time.perf_counter()
    content: str | bytes
    if output_format == "pdf":
        try:
            content = generate_invoice_pdf(invoice, business=settings.business)
        except PdfGenerationError:
            logger.exception("PDF conversion failed for invoice=%s", invoice.invoice_number)
            return 1
    else:
        content = generate_invoice_html(invoice, business=settings.business)

    if output is not None:
        target = Path(output)
        if target.is_dir():
            target = target / invoice_filename(invoice.invoice_number, output_format)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content if isinstance(content, bytes) else content.encode("utf-8"))
        location = str(target)
    else:
        location = build_document_store(settings).save(invoice.invoice_number, output_format, content)

    log_invoice_event(
        logger,
        logging.INFO,
        f"Invoice written to {location}",
        invoice_number=invoice.invoice_number,
        stage="render",
        latency_ms=int((time.perf_counter() - started) * 1000),
        outcome="success",
    )
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Studio invoice documents")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render an invoice JSON file")
    render.add_argument("input", help="Path to an invoice record in JSON")
    render.add_argument("--format", dest="output_format", default="html", choices=["html", "pdf"])
    render.add_argument("--output", default=None, help="File or directory to write to")

    serve = subparsers.add_parser("serve", help="Run the invoice HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command == "render":
        return run_render(args.input, output_format=args.output_format, output=args.output)
    if args.command == "serve":
        from app.api_main import main as serve

        serve(host=args.host, port=args.port)
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
