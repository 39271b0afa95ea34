"""
ASGI entry point for the termsnap API.

Loads ``.env`` before the application factory runs so that the calendar,
entities and store locations are visible to :func:`load_settings`.

Usage
-----
    $ python -m termsnap.api.server
    $ uvicorn termsnap.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from termsnap.api.app import create_app

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #

load_dotenv(dotenv_path=Path(".env"))

app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    uvicorn.run(
        "termsnap.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
