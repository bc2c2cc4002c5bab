from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got: {raw}") from exc


@dataclass(frozen=True)
class BusinessProfile:
    name: str = "Christian Picaso Photography"
    tagline: str = "Professional Photography Services • Hawaii"
    email: str = "contact@christianpicaso.com"
    website: str = "www.christianpicaso.com"
    owner: str = "Christian Picaso"
    region: str = "Hawaii"

    @property
    def logo_lines(self) -> tuple[str, ...]:
        words = self.name.split()
        if len(words) >= 3 and words[-1].lower() == "photography":
            return (words[0], " ".join(words[1:-1]), words[-1])
        return (self.name,)


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    storage_backend: str = "local"
    output_dir: str = "invoices"
    r2_endpoint_url: str | None = None
    r2_access_key_id: str | None = None
    r2_secret_access_key: str | None = None
    r2_bucket_name: str | None = None
    r2_invoice_prefix: str = "invoices/"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_ssl: bool = False
    email_from_address: str = "Christian Picaso Photography <contact@christianpicaso.com>"
    payment_link_base_url: str = "https://pay.christianpicaso.com"
    business: BusinessProfile = field(default_factory=BusinessProfile)

    @classmethod
    def from_env(cls) -> "Settings":
        storage_backend = os.getenv("INVOICE_STORAGE_BACKEND", "local").strip().lower()
        if storage_backend not in {"local", "r2"}:
            raise ValueError("INVOICE_STORAGE_BACKEND must be one of: local, r2")

        r2_endpoint_url = os.getenv("R2_ENDPOINT_URL")
        r2_access_key_id = os.getenv("R2_ACCESS_KEY_ID")
        r2_secret_access_key = os.getenv("R2_SECRET_ACCESS_KEY")
        r2_bucket_name = os.getenv("R2_BUCKET_NAME")
        if storage_backend == "r2":
            missing = [
                key
                for key, value in {
                    "R2_ENDPOINT_URL": r2_endpoint_url,
                    "R2_ACCESS_KEY_ID": r2_access_key_id,
                    "R2_SECRET_ACCESS_KEY": r2_secret_access_key,
                    "R2_BUCKET_NAME": r2_bucket_name,
                }.items()
                if not value or not value.strip()
            ]
            if missing:
                raise ValueError(f"Missing required environment variable(s) for R2: {', '.join(missing)}")

        smtp_port = _parse_int("SMTP_PORT", 587)
        if not 0 < smtp_port < 65536:
            raise ValueError(f"SMTP_PORT out of range: {smtp_port}")

        defaults = BusinessProfile()
        business = BusinessProfile(
            name=os.getenv("BUSINESS_NAME", defaults.name),
            tagline=os.getenv("BUSINESS_TAGLINE", defaults.tagline),
            email=os.getenv("BUSINESS_EMAIL", defaults.email),
            website=os.getenv("BUSINESS_WEBSITE", defaults.website),
            owner=os.getenv("BUSINESS_OWNER", defaults.owner),
            region=os.getenv("BUSINESS_REGION", defaults.region),
        )

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            storage_backend=storage_backend,
            output_dir=os.getenv("INVOICE_OUTPUT_DIR", "invoices"),
            r2_endpoint_url=r2_endpoint_url,
            r2_access_key_id=r2_access_key_id,
            r2_secret_access_key=r2_secret_access_key,
            r2_bucket_name=r2_bucket_name,
            r2_invoice_prefix=os.getenv("R2_INVOICE_PREFIX", "invoices/"),
            smtp_host=os.getenv("SMTP_HOST"),
            smtp_port=smtp_port,
            smtp_username=os.getenv("SMTP_USERNAME"),
            smtp_password=os.getenv("SMTP_PASSWORD"),
            smtp_use_ssl=_parse_bool(os.getenv("SMTP_USE_SSL")),
            email_from_address=os.getenv(
                "EMAIL_FROM_ADDRESS", f"{business.name} <{business.email}>"
            ),
            payment_link_base_url=os.getenv(
                "PAYMENT_LINK_BASE_URL", "https://pay.christianpicaso.com"
            ),
            business=business,
        )


def load_dotenv(path: str | Path = ".env") -> None:
    env_path = Path(path)
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        entry = line.strip()
        if not entry or entry.startswith("#") or "=" not in entry:
            continue
        key, value = entry.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)
