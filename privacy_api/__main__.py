"""Run the API server with uvicorn."""

import uvicorn

from privacy_api.core.config import settings


def main() -> None:
    """Start the server on the configured host and port."""
    uvicorn.run(
        "privacy_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
