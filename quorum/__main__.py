"""
quorum.__main__ — Entry point for ``python -m quorum``
======================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (deployment + gameplay settings).
3. Serve the FastAPI app with uvicorn on ``api_port``.

The store and services are built by the app's lifespan hook.
"""

from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

from quorum.config import load_config

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("quorum")


def main() -> None:
    """Bootstrap and run the Quorum API."""
    load_dotenv()

    cfg = load_config(os.getenv("QUORUM_CONFIG", "config.yaml"))
    logger.info("Config loaded — Community: %s", cfg.community_name)

    try:
        uvicorn.run("quorum.api.main:app", host="0.0.0.0", port=cfg.api_port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
