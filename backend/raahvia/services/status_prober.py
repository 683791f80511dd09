from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from raahvia.config import ClientConfig, settings

logger = logging.getLogger("raahvia.status_prober")

OFFLINE_STATUS = {
    "online": False,
    "message": "Backend offline - App will use fallback data",
    "note": "Navigation will still work 100% offline after QR scan",
}


class StatusProber:
    """Best-effort liveness probe of the gateway's /health endpoint.

    Used for UI state only; scans never wait on it.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ClientConfig.from_settings(settings)
        self._client = httpx.AsyncClient(
            transport=transport, headers={"Accept": "application/json"}, timeout=None
        )

    async def check_status(self) -> Dict[str, Any]:
        try:
            r = await asyncio.wait_for(
                self._client.get(self.config.health_url), timeout=self.config.timeout_s
            )
            r.raise_for_status()
            data = r.json()
            if not isinstance(data, dict):
                raise ValueError("health payload is not an object")
        except (asyncio.TimeoutError, httpx.HTTPError, ValueError) as e:
            logger.info(f"Backend status probe failed: {type(e).__name__}: {e}")
            return dict(OFFLINE_STATUS)
        except Exception:
            # e.g. httpx.InvalidURL from a malformed base URL
            logger.exception("Unexpected failure during status check")
            return dict(OFFLINE_STATUS)
        return {**data, "online": True}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "StatusProber":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
