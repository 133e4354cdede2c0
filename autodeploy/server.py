"""Console entry point: serve the API with uvicorn."""

from __future__ import annotations

import uvicorn

from autodeploy.app import create_app
from autodeploy.config import settings
from autodeploy.logs import configure_logging


def main() -> None:
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.bind_host,
        port=settings.bind_port,
        log_config=None,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
