"""
MarkPrint entrypoint - runs uvicorn server.
"""

import uvicorn

from markprint.app import build_app
from markprint.config import get_settings


def main() -> None:
    """Run the MarkPrint server."""
    settings = get_settings()
    app = build_app(settings)

    print(f"Starting MarkPrint on http://{settings.host}:{settings.port}")

    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which closes the browser
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
