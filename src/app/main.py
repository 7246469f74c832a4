"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn app.main:app --reload

    # Installed script
    kitchen-service
"""

import uvicorn

from app.core.config import get_settings
from app.factory import create_app


app = create_app()


def main() -> None:
    """Run the API server with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
