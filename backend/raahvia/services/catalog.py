from __future__ import annotations

import datetime as dt
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from raahvia.errors import NotFoundError
from raahvia.schemas.navigation import (
    ClampBounds,
    Destination,
    DestinationList,
    DestinationSummary,
    ImageDimensions,
    Navigation,
    NavigationResponse,
    PathLookup,
    Point,
    ResponseMetadata,
    ScannedLocation,
)
from raahvia.services.path_geometry import build_linear_path
from raahvia.utils.time import utc_now

logger = logging.getLogger("raahvia.catalog")

DEFAULT_CATALOG_PATH = pathlib.Path(__file__).resolve().parent.parent / "data" / "catalog.yaml"
BACKEND_NOTE = "Static navigation metadata; progress tracking uses device sensors"


@dataclass(frozen=True)
class Entrance:
    qr_code: str
    location: str
    name: str


@dataclass
class Building:
    id: str
    name: str
    area: str
    zone: str
    map_image: str
    primary_destination: str
    entrances: List[Entrance] = field(default_factory=list)
    destinations: Dict[str, Destination] = field(default_factory=dict)


class CatalogError(Exception):
    """The catalog file is missing or describes invalid geometry."""


class NavigationCatalog:
    """Read-only lookups over the static building catalog.

    Built once at startup; request handlers only read from it.
    """

    def __init__(self, buildings: List[Building]):
        self._buildings: Dict[str, Building] = {}
        self._by_code: Dict[str, Tuple[Building, Entrance]] = {}
        self._by_destination: Dict[str, Building] = {}

        for b in buildings:
            self._buildings[b.id.lower()] = b
            self._buildings.setdefault(b.name.lower(), b)
            for e in b.entrances:
                self._by_code[e.qr_code.lower()] = (b, e)
            for dest_id in b.destinations:
                self._by_destination[dest_id] = b

    @property
    def buildings(self) -> List[Building]:
        seen: Dict[str, Building] = {b.id: b for b in self._buildings.values()}
        return list(seen.values())

    def resolve_scan(self, qr_code: str, now: Optional[dt.datetime] = None) -> NavigationResponse:
        key = (qr_code or "").strip().lower()
        hit = self._by_code.get(key)
        if hit is None:
            raise NotFoundError("QR code", qr_code)
        building, entrance = hit
        dest = building.destinations[building.primary_destination]
        start = dest.svg_path.points[0]

        return NavigationResponse(
            success=True,
            scanned_data=ScannedLocation(
                qr_code=qr_code,
                scanned_location=entrance.location,
                area=building.area,
                target_zone=building.zone,
                is_valid=True,
                name=entrance.name,
                timestamp=now or utc_now(),
                map_image=building.map_image,
            ),
            navigation=Navigation(
                building=building.name,
                map_image=building.map_image,
                start_node=Point(x=start.x, y=start.y),
                stage_destination=dest,
            ),
            metadata=ResponseMetadata(backend_used=True, source="backend", note=BACKEND_NOTE),
        )

    def list_destinations(self, building: str) -> DestinationList:
        b = self._buildings.get((building or "").strip().lower())
        if b is None:
            raise NotFoundError("Building", building)
        return DestinationList(
            building=b.name,
            map_image=b.map_image,
            destinations=[
                DestinationSummary(
                    id=d.id,
                    title=d.title,
                    total_steps=d.total_steps,
                    distance_meters=d.distance_meters,
                    path_angle=d.path_angle,
                )
                for d in b.destinations.values()
            ],
        )

    def get_path(self, destination_id: str) -> PathLookup:
        b = self._by_destination.get((destination_id or "").strip())
        if b is None:
            raise NotFoundError("Destination", destination_id)
        return PathLookup(
            building=b.name,
            map_image=b.map_image,
            destination=b.destinations[destination_id.strip()],
        )


def _build_destination(raw: Dict[str, Any], image: ImageDimensions, pixels_per_meter: float) -> Destination:
    start = raw["start"]
    geometry = build_linear_path(
        start=(float(start["x"]), float(start["y"])),
        total_steps=int(raw["total_steps"]),
        distance_meters=float(raw["distance_meters"]),
        pixels_per_meter=pixels_per_meter,
        heading=raw.get("heading", "up"),
        bounds=ClampBounds(**raw["clamp_bounds"]),
        image_dimensions=image,
        allowed_deviation=float(raw.get("allowed_deviation", 25)),
    )
    return Destination(
        id=raw["id"],
        title=raw["title"],
        total_steps=int(raw["total_steps"]),
        distance_meters=float(raw["distance_meters"]),
        path_angle=float(raw.get("path_angle", 0)),
        svg_path=geometry,
    )


def _build_building(raw: Dict[str, Any]) -> Building:
    image = ImageDimensions(**raw["image"])
    ppm = float(raw["pixels_per_meter"])
    destinations = {d["id"]: _build_destination(d, image, ppm) for d in raw.get("destinations", [])}
    primary = raw.get("primary_destination") or next(iter(destinations), None)
    if primary not in destinations:
        raise CatalogError(f"building {raw['id']!r}: primary destination {primary!r} not defined")
    return Building(
        id=raw["id"],
        name=raw.get("name", raw["id"]),
        area=raw.get("area", raw.get("name", raw["id"])),
        zone=raw.get("zone", raw["id"]),
        map_image=raw["map_image"],
        primary_destination=primary,
        entrances=[
            Entrance(qr_code=e["qr_code"], location=e["location"], name=e["name"])
            for e in raw.get("entrances", [])
        ],
        destinations=destinations,
    )


def load_catalog(path: Optional[pathlib.Path] = None) -> NavigationCatalog:
    """Parse and validate the YAML catalog. Raises CatalogError on any problem."""
    catalog_path = path or DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f) or {}
        buildings = [_build_building(b) for b in doc.get("buildings", [])]
    except CatalogError:
        raise
    except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"failed to load catalog {catalog_path}: {e}") from e

    if not buildings:
        raise CatalogError(f"catalog {catalog_path} defines no buildings")

    catalog = NavigationCatalog(buildings)
    logger.info(
        f"Loaded catalog: {len(catalog.buildings)} building(s), "
        f"{sum(len(b.destinations) for b in catalog.buildings)} destination(s)"
    )
    return catalog
