from __future__ import annotations

import gc
import resource
import sys
import time

from fastapi import APIRouter, Request

from raahvia.config import settings
from raahvia.utils.time import iso_now

router = APIRouter()


def _rss_mb() -> int:
    # ru_maxrss is KiB on Linux, bytes on macOS
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(rss / divisor)


@router.get("/health")
def health(request: Request):
    """Liveness plus uptime/memory stats."""
    started = getattr(request.app.state, "started_at", None)
    uptime = time.monotonic() - started if started is not None else 0.0
    return {
        "success": True,
        "status": "ONLINE",
        "service": settings.service_name,
        "version": settings.service_version,
        "environment": settings.environment,
        "uptime": round(uptime, 3),
        "memory": {
            "rss": f"{_rss_mb()}MB",
            # GC-tracked Python objects; the interpreter has no V8-style heap figure
            "heapObjects": len(gc.get_objects()),
        },
        "timestamp": iso_now(),
    }
