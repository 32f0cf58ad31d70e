"""Run the API server on the configured host and port."""

import uvicorn

from sketchvault.app.config import get_settings


def main() -> None:
    """Start uvicorn with settings from the environment / .env."""
    settings = get_settings()
    uvicorn.run(
        "sketchvault.app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
