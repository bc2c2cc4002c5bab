from __future__ import annotations

import uvicorn

from app.api import create_invoice_app
from app.config import Settings, load_dotenv
from app.logger import configure_logging

load_dotenv()
settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_invoice_app(settings)


def main(host: str = "0.0.0.0", port: int = 8000) -> None:
    uvicorn.run("app.api_main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
