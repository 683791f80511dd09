from __future__ import annotations

import datetime as dt
import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Source = Literal["backend", "offline_fallback"]

# Relative tolerance for stepProgress vs pixelsPerMeter * stepCalibration.
# Backends round the published constants (e.g. 5.714 for 5.7142857...).
STEP_PROGRESS_REL_TOL = 0.01


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python.

    Unknown fields are kept so a backend response round-trips unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Point(WireModel):
    x: float
    y: float


class ImageDimensions(WireModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ClampBounds(WireModel):
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @model_validator(mode="after")
    def _ordered(self) -> "ClampBounds":
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError("clampBounds min must not exceed max")
        return self

    def contains(self, p: Point) -> bool:
        return self.min_x <= p.x <= self.max_x and self.min_y <= p.y <= self.max_y


class PathGeometry(WireModel):
    image_dimensions: ImageDimensions
    points: List[Point] = Field(..., min_length=1)
    path_string: str
    clamp_bounds: ClampBounds
    step_calibration: float = Field(..., gt=0)  # metres per detected step
    pixels_per_meter: float = Field(..., gt=0)
    step_progress: float = Field(..., gt=0)  # pixels per step along the path
    allowed_deviation: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _consistent(self) -> "PathGeometry":
        outside = [p for p in self.points if not self.clamp_bounds.contains(p)]
        if outside:
            raise ValueError(f"{len(outside)} path point(s) outside clampBounds")
        expected = self.pixels_per_meter * self.step_calibration
        if not math.isclose(self.step_progress, expected, rel_tol=STEP_PROGRESS_REL_TOL):
            raise ValueError(
                f"stepProgress {self.step_progress} inconsistent with "
                f"pixelsPerMeter*stepCalibration {expected:.4f}"
            )
        return self


class Destination(WireModel):
    id: str
    title: str
    total_steps: int = Field(..., gt=0)
    distance_meters: float = Field(..., gt=0)
    path_angle: float = Field(..., ge=0, lt=360)
    svg_path: PathGeometry


class Navigation(WireModel):
    building: str
    map_image: str = Field(..., min_length=1)
    start_node: Point
    stage_destination: Destination


class ScannedLocation(WireModel):
    qr_code: str
    scanned_location: str
    area: str
    target_zone: str
    is_valid: bool
    name: str
    timestamp: dt.datetime
    map_image: str


class ResponseMetadata(WireModel):
    backend_used: bool
    source: Source
    note: str = ""


class NavigationResponse(WireModel):
    success: bool
    scanned_data: ScannedLocation
    navigation: Navigation
    metadata: ResponseMetadata

    @model_validator(mode="after")
    def _map_image_present(self) -> "NavigationResponse":
        if self.success and not self.navigation.map_image.strip():
            raise ValueError("success response without navigation.mapImage")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ScanRequest(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    qr_data: str = Field(..., min_length=1)
    device_id: str = "unknown"
    platform: str = "unknown"
    app_version: str = "0.0.0"
    timestamp: Optional[dt.datetime] = None


class DestinationSummary(WireModel):
    id: str
    title: str
    total_steps: int
    distance_meters: float
    path_angle: float


class DestinationList(WireModel):
    success: bool = True
    building: str
    map_image: str
    destinations: List[DestinationSummary]


class PathLookup(WireModel):
    success: bool = True
    building: str
    map_image: str
    destination: Destination
