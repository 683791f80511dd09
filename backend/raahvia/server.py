"""Process entry point for the gateway.

uvicorn owns the request loop: each request is handled in isolation (faults are
turned into 500 envelopes by the app), SIGINT/SIGTERM stop accepting
connections, drain in-flight requests and exit 0. Anything that goes wrong
before the server is serving is fatal and exits non-zero.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn

from raahvia.config import settings
from raahvia.observability.logging import configure_logging

logger = logging.getLogger("raahvia.server")

EXIT_STARTUP_FAILURE = 1


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    configure_logging()
    try:
        settings.validate_runtime()
        config = uvicorn.Config(
            "raahvia.main:app",
            host=host or settings.backend_host,
            port=port or settings.backend_port,
            log_level=settings.log_level.lower(),
            lifespan="on",
        )
        server = uvicorn.Server(config)
    except Exception:
        logger.exception("❌ Fatal error during startup")
        sys.exit(EXIT_STARTUP_FAILURE)

    server.run()
    if not server.started:
        logger.error("❌ Server failed to start")
        sys.exit(EXIT_STARTUP_FAILURE)
    logger.info("✅ Server closed")


if __name__ == "__main__":
    run()
