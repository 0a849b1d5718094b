"""Run the API server.

Usage:
    python -m arsyilla
"""

import uvicorn

from .core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "arsyilla.main:build_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
