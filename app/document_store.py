from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Protocol

from app.config import Settings

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")

CONTENT_TYPES = {
    "html": "text/html; charset=utf-8",
    "pdf": "application/pdf",
}


class StorageError(RuntimeError):
    pass


def invoice_filename(invoice_number: str, extension: str) -> str:
    safe_number = _UNSAFE_CHARS_RE.sub("-", invoice_number.strip()).strip(".")
    if not safe_number:
        raise StorageError(f"Invoice number cannot be used as a file name: {invoice_number!r}")
    return f"invoice-{safe_number}.{extension.lstrip('.')}"


def _as_bytes(content: str | bytes) -> bytes:
    if isinstance(content, bytes):
        return content
    return content.encode("utf-8")


class DocumentStore(Protocol):
    def save(self, invoice_number: str, extension: str, content: str | bytes) -> str:
        """Persist one rendered document and return where it was written."""


class LocalDocumentStore:
    def __init__(self, root: str | Path = "invoices") -> None:
        self._root = Path(root)

    def save(self, invoice_number: str, extension: str, content: str | bytes) -> str:
        target = self._root / invoice_filename(invoice_number, extension)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            target.write_bytes(_as_bytes(content))
        except OSError as exc:
            raise StorageError(f"Failed to write {target}: {exc}") from exc
        return str(target)


class R2DocumentStore:
    def __init__(self, s3_client: Any, bucket: str | None, prefix: str = "invoices/") -> None:
        if not bucket:
            raise ValueError("R2_BUCKET_NAME must be configured for R2DocumentStore.")
        self._s3 = s3_client
        self._bucket = bucket
        self._prefix = prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "R2DocumentStore":
        try:
            import boto3
        except ImportError as exc:
            raise RuntimeError("boto3 is required for Cloudflare R2 storage") from exc
        client = boto3.client(
            "s3",
            endpoint_url=settings.r2_endpoint_url,
            aws_access_key_id=settings.r2_access_key_id,
            aws_secret_access_key=settings.r2_secret_access_key,
            region_name="auto",
        )
        return cls(s3_client=client, bucket=settings.r2_bucket_name, prefix=settings.r2_invoice_prefix)

    def save(self, invoice_number: str, extension: str, content: str | bytes) -> str:
        filename = invoice_filename(invoice_number, extension)
        key = f"{self._prefix.rstrip('/')}/{filename}" if self._prefix.strip("/") else filename
        self._s3.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=_as_bytes(content),
            ContentType=CONTENT_TYPES.get(extension.lstrip("."), "application/octet-stream"),
        )
        return key


def build_document_store(settings: Settings) -> DocumentStore:
    if settings.storage_backend == "r2":
        return R2DocumentStore.from_settings(settings)
    return LocalDocumentStore(settings.output_dir)
