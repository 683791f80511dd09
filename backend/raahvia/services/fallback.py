"""Offline fallback synthesis.

When the backend cannot be reached (or answers with something unusable) the
client still needs a complete navigation bundle. ``synthesize`` builds one from
a small built-in table, keyed by zone class, so navigation can start on device
sensors alone.

Usage:
    resp = synthesize("aud_entrance")
    resp.metadata.source  # "offline_fallback"
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from raahvia.schemas.navigation import (
    ClampBounds,
    Destination,
    ImageDimensions,
    Navigation,
    NavigationResponse,
    Point,
    ResponseMetadata,
    ScannedLocation,
)
from raahvia.services.path_geometry import Heading, build_linear_path
from raahvia.utils.time import utc_now

OFFLINE_NOTE = "Navigation will use device sensors (pedometer, gyroscope, magnetometer)"


@dataclass(frozen=True)
class ZoneProfile:
    zone: str
    building: str
    area: str
    map_image: str
    scanned_location: str
    entrance_name: str
    destination_id: str
    destination_title: str
    total_steps: int
    distance_meters: float
    path_angle: float
    start: Tuple[float, float]
    heading: Heading
    bounds: Tuple[float, float, float, float]  # min_x, max_x, min_y, max_y
    image_size: Tuple[int, int]
    pixels_per_meter: float
    allowed_deviation: float


# map_image must match a bundled asset filename on the device.
ZONE_PROFILES: Dict[str, ZoneProfile] = {
    "auditorium": ZoneProfile(
        zone="auditorium",
        building="Auditorium",
        area="Auditorium",
        map_image="auditorium_map.png",
        scanned_location="auditorium_main_gate",
        entrance_name="GD Birla Auditorium Main Entrance",
        destination_id="aud_stage",
        destination_title="Auditorium Stage",
        total_steps=42,
        distance_meters=32.0,
        path_angle=171,
        start=(150, 280),
        heading="up",
        bounds=(145, 155, 40, 280),
        image_size=(300, 300),
        pixels_per_meter=7.5,
        allowed_deviation=25,
    ),
    "library": ZoneProfile(
        zone="library",
        building="Library",
        area="Central Library",
        map_image="library_map.png",
        scanned_location="library_front_desk",
        entrance_name="Central Library Entrance",
        destination_id="lib_reading_hall",
        destination_title="Central Reading Hall",
        total_steps=30,
        distance_meters=21.0,
        path_angle=90,
        start=(40, 200),
        heading="right",
        bounds=(40, 250, 195, 205),
        image_size=(300, 300),
        pixels_per_meter=10.0,
        allowed_deviation=20,
    ),
}

DEFAULT_ZONE = "auditorium"

KNOWN_CODES: Dict[str, str] = {
    "aud_entrance": "auditorium",
    "aud_main_gate": "auditorium",
    "lib_entrance": "library",
}

CODE_PREFIXES: Dict[str, str] = {
    "aud": "auditorium",
    "lib": "library",
}


def classify_zone(qr_data: str) -> Tuple[str, bool]:
    """Return (zone, recognized) for a scanned code.

    Exact code match first, then prefix, then the default zone.
    """
    code = (qr_data or "").strip().lower()
    if code in KNOWN_CODES:
        return KNOWN_CODES[code], True
    for prefix, zone in CODE_PREFIXES.items():
        if code.startswith(prefix):
            return zone, True
    return DEFAULT_ZONE, False


def _destination(profile: ZoneProfile) -> Destination:
    min_x, max_x, min_y, max_y = profile.bounds
    width, height = profile.image_size
    geometry = build_linear_path(
        start=profile.start,
        total_steps=profile.total_steps,
        distance_meters=profile.distance_meters,
        pixels_per_meter=profile.pixels_per_meter,
        heading=profile.heading,
        bounds=ClampBounds(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y),
        image_dimensions=ImageDimensions(width=width, height=height),
        allowed_deviation=profile.allowed_deviation,
    )
    return Destination(
        id=profile.destination_id,
        title=profile.destination_title,
        total_steps=profile.total_steps,
        distance_meters=profile.distance_meters,
        path_angle=profile.path_angle,
        svg_path=geometry,
    )


def synthesize(qr_data: str, now: Optional[dt.datetime] = None) -> NavigationResponse:
    """Build a complete offline NavigationResponse for ``qr_data``.

    Deterministic apart from the timestamp; does no I/O.
    """
    zone, recognized = classify_zone(qr_data)
    profile = ZONE_PROFILES[zone]
    ts = now or utc_now()

    return NavigationResponse(
        success=True,
        scanned_data=ScannedLocation(
            qr_code=qr_data,
            scanned_location=profile.scanned_location,
            area=profile.area,
            target_zone=profile.zone,
            is_valid=recognized,
            name=profile.entrance_name,
            timestamp=ts,
            map_image=profile.map_image,
        ),
        navigation=Navigation(
            building=profile.building,
            map_image=profile.map_image,
            start_node=Point(x=profile.start[0], y=profile.start[1]),
            stage_destination=_destination(profile),
        ),
        metadata=ResponseMetadata(
            backend_used=False,
            source="offline_fallback",
            note=OFFLINE_NOTE,
        ),
    )
