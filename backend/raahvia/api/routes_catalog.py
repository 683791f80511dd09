from __future__ import annotations

from fastapi import APIRouter, Depends

from raahvia.deps import get_catalog
from raahvia.schemas.navigation import DestinationList, PathLookup
from raahvia.services.catalog import NavigationCatalog

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/destinations/{building}", response_model=DestinationList)
def list_destinations(building: str, catalog: NavigationCatalog = Depends(get_catalog)):
    """Destinations reachable inside a building (id or name, case-insensitive)."""
    return catalog.list_destinations(building)


@router.get("/path/{destination_id}", response_model=PathLookup)
def get_path(destination_id: str, catalog: NavigationCatalog = Depends(get_catalog)):
    return catalog.get_path(destination_id)
