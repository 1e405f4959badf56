"""
Run the SIGEG API with uvicorn.

Usage:
    sigeg-server
    # or
    python -m sigeg.api.server

Host, port and the data file come from SIGEG_API_* / SIGEG_STORAGE_*
environment variables (or .env).
"""

import structlog
import uvicorn

from sigeg.api.app import create_app
from sigeg.audit import configure_logging
from sigeg.config import get_settings
from sigeg.services.storage import JsonFileTaskStorage


logger = structlog.get_logger(__name__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.app.log_level)

    api_settings = settings.api
    storage = JsonFileTaskStorage()
    app = create_app(storage=storage)

    logger.info(
        "server_starting",
        url=f"http://{api_settings.host}:{api_settings.port}",
        data_file=str(storage.path),
    )
    uvicorn.run(
        app,
        host=api_settings.host,
        port=api_settings.port,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    main()
