"""Scan retrieval client.

Primary: POST the scan to the backend gateway under a hard client-side deadline.
Fallback: locally synthesized metadata whenever the live call fails in any way.

Usage:
    async with RetrievalClient(ClientConfig(base_url="http://10.0.0.5:5000/api")) as client:
        resp = await client.scan("aud_entrance")
        resp.metadata.source  # "backend" or "offline_fallback"
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

import httpx
from pydantic import ValidationError

from raahvia.config import ClientConfig, settings
from raahvia.errors import (
    HttpStatusError,
    NetworkError,
    PayloadValidationError,
    RetrievalError,
    ScanTimeoutError,
)
from raahvia.schemas.navigation import NavigationResponse, ScanRequest
from raahvia.services.fallback import synthesize
from raahvia.utils.time import utc_now

logger = logging.getLogger("raahvia.retrieval_client")

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of racing one request against its deadline."""

    kind: Literal["response", "timeout", "error"]
    response: Optional[httpx.Response] = None
    error: Optional[Exception] = None


class RetrievalClient:
    """Fetches navigation metadata for a scanned code. ``scan`` never raises.

    One httpx.AsyncClient per instance; no per-scan state is kept, so concurrent
    scans on the same instance are independent.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ClientConfig.from_settings(settings)
        # httpx timeouts are disabled; the deadline is enforced by cancellation below
        self._client = httpx.AsyncClient(transport=transport, headers=JSON_HEADERS, timeout=None)

    async def __aenter__(self) -> "RetrievalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------

    def build_request(self, qr_data: str) -> ScanRequest:
        return ScanRequest(
            qr_data=qr_data,
            device_id=self.config.device_id,
            platform=self.config.platform,
            app_version=self.config.app_version,
            timestamp=utc_now(),
        )

    async def scan(self, qr_data: str) -> NavigationResponse:
        """Live metadata if the backend delivers a valid answer in time, else the offline bundle."""
        logger.info(f"📱 QR scan: {qr_data!r}")
        try:
            result = await self.fetch(qr_data)
        except RetrievalError as e:
            logger.warning(f"⚠️ Backend unavailable ({type(e).__name__}: {e}), using offline fallback")
            return synthesize(qr_data)
        except Exception:
            logger.exception("Unexpected failure during scan, using offline fallback")
            return synthesize(qr_data)

        dest = result.navigation.stage_destination
        logger.info(
            f"✅ Backend metadata received: map={result.navigation.map_image} "
            f"steps={dest.total_steps}"
        )
        return result

    async def fetch(self, qr_data: str) -> NavigationResponse:
        """Live path only: raises a RetrievalError subclass on failure.

        Transient failures are retried up to ``max_retries`` times with a fixed
        delay, all inside the single ``timeout_ms`` budget.
        """
        if not qr_data:
            raise PayloadValidationError("empty QR data")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.timeout_s
        payload = self.build_request(qr_data).model_dump(mode="json", by_alias=True)
        retries_left = self.config.max_retries

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ScanTimeoutError(f"deadline of {self.config.timeout_ms} ms exceeded")

            outcome = await self._attempt(payload, remaining)
            try:
                return self._resolve(outcome)
            except RetrievalError as e:
                if not e.transient or retries_left <= 0:
                    raise
                remaining = deadline - loop.time()
                if remaining - self.config.retry_delay_s < self.config.min_attempt_s:
                    logger.info(f"No time left in deadline for a retry after {type(e).__name__}")
                    raise
                retries_left -= 1
                logger.info(
                    f"🔄 Retrying scan in {self.config.retry_delay_ms} ms "
                    f"after {type(e).__name__} ({retries_left} retries left)"
                )
                await asyncio.sleep(self.config.retry_delay_s)

    async def _attempt(self, payload: Dict[str, Any], timeout_s: float) -> AttemptOutcome:
        try:
            r = await asyncio.wait_for(
                self._client.post(self.config.scan_url, json=payload),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            # wait_for cancelled the request; whatever arrives later is dropped
            return AttemptOutcome(kind="timeout")
        except httpx.HTTPError as e:
            return AttemptOutcome(kind="error", error=e)
        return AttemptOutcome(kind="response", response=r)

    def _resolve(self, outcome: AttemptOutcome) -> NavigationResponse:
        if outcome.kind == "timeout":
            raise ScanTimeoutError(f"no response within {self.config.timeout_ms} ms")
        if outcome.kind == "error":
            if isinstance(outcome.error, httpx.TimeoutException):
                raise ScanTimeoutError(str(outcome.error) or "transport timeout")
            raise NetworkError(str(outcome.error) or type(outcome.error).__name__)

        r = outcome.response
        if not r.is_success:
            raise HttpStatusError(r.status_code, r.reason_phrase)
        return parse_navigation_response(r)


def parse_navigation_response(r: httpx.Response) -> NavigationResponse:
    """Validate a 2xx backend body and stamp it as backend-sourced."""
    try:
        body = r.json()
    except ValueError as e:
        raise PayloadValidationError(f"response is not JSON: {e}")

    if not isinstance(body, dict) or body.get("success") is not True:
        raise PayloadValidationError("response success flag is not true")
    nav = body.get("navigation")
    if not isinstance(nav, dict):
        raise PayloadValidationError("response has no navigation block")
    map_image = nav.get("mapImage")
    if not isinstance(map_image, str) or not map_image.strip():
        raise PayloadValidationError("response navigation has no mapImage")

    meta = body.get("metadata") if isinstance(body.get("metadata"), dict) else {}
    merged = {
        **body,
        "metadata": {"note": "", **meta, "backendUsed": True, "source": "backend"},
    }
    try:
        return NavigationResponse.model_validate(merged)
    except ValidationError as e:
        raise PayloadValidationError(f"invalid navigation payload: {e.error_count()} error(s)")
