"""
Entrypoint that resolves the deployment port before booting uvicorn.

Some hosting providers invoke the start command without shell expansion, so
``--port $PORT`` reaches uvicorn as a literal string.  Reading the environment
here avoids that.
"""

from __future__ import annotations

import logging
import os

import uvicorn

from price_feed.config import get_settings
from price_feed.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _resolve_port(default: int = 8000) -> int:
    """Return the port uvicorn should bind to, guarding against bad inputs."""
    raw = os.environ.get("PORT")
    if raw is None or raw == "":
        return default
    try:
        port = int(raw)
        if port <= 0:
            raise ValueError("Port must be positive")
        return port
    except (TypeError, ValueError):
        logger.warning("Invalid PORT=%r; falling back to %d", raw, default)
        return default


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    host = os.environ.get("HOST", "0.0.0.0")
    # log_config=None keeps uvicorn on the JSON root handler.
    uvicorn.run("price_feed.server:app", host=host, port=_resolve_port(), log_config=None)


if __name__ == "__main__":
    main()
