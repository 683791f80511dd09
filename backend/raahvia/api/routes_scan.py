from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from raahvia.deps import get_catalog
from raahvia.schemas.navigation import NavigationResponse, ScanRequest
from raahvia.services.catalog import NavigationCatalog

router = APIRouter(prefix="/api", tags=["scan"])
logger = logging.getLogger("raahvia.api.scan")


@router.post("/qr-scan", response_model=NavigationResponse)
def qr_scan(payload: ScanRequest, catalog: NavigationCatalog = Depends(get_catalog)):
    """Resolve a scanned code to navigation metadata.

    Unknown codes raise NotFoundError, rendered as a 404 envelope.
    """
    logger.info(
        f"[SCAN] code={payload.qr_data!r} device={payload.device_id} "
        f"platform={payload.platform} app={payload.app_version}"
    )
    return catalog.resolve_scan(payload.qr_data)


@router.get("/qr/{qr_code}", response_model=NavigationResponse)
def qr_lookup(qr_code: str, catalog: NavigationCatalog = Depends(get_catalog)):
    """GET variant of /qr-scan for browsers and quick manual checks."""
    return catalog.resolve_scan(qr_code)
