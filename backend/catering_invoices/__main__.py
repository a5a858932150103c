"""Run the API with uvicorn: ``python -m catering_invoices``."""

import uvicorn

from catering_invoices.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "catering_invoices.main:app",
        host="0.0.0.0",
        port=settings.backend_port,
        reload=settings.is_development and settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
