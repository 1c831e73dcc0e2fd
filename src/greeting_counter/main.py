"""Command-line entrypoint that serves the app with uvicorn."""

import uvicorn

from greeting_counter.config import Settings


def main() -> None:
    """Run the API server on the configured host and port."""
    settings = Settings()
    uvicorn.run(
        "greeting_counter.api.asgi:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
