from __future__ import annotations

from typing import Dict, List, Literal, Tuple

from raahvia.schemas.navigation import ClampBounds, ImageDimensions, PathGeometry, Point

Heading = Literal["up", "down", "left", "right"]

# (axis, sign) in image pixel space: y grows downwards.
_HEADINGS: Dict[str, Tuple[str, int]] = {
    "up": ("y", -1),
    "down": ("y", 1),
    "left": ("x", -1),
    "right": ("x", 1),
}


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def clamp_point(x: float, y: float, bounds: ClampBounds) -> Point:
    return Point(x=_clamp(x, bounds.min_x, bounds.max_x), y=_clamp(y, bounds.min_y, bounds.max_y))


def generate_points(
    start: Tuple[float, float],
    total_steps: int,
    step_progress: float,
    heading: Heading,
    bounds: ClampBounds,
) -> List[Point]:
    """One waypoint per detected step, plus the start.

    Consecutive points are ``step_progress`` pixels apart along the heading axis.
    Every point is clamped into ``bounds`` so float drift on the last step
    cannot leave the corridor.
    """
    if total_steps <= 0:
        raise ValueError("total_steps must be > 0")
    axis, sign = _HEADINGS[heading]
    sx, sy = float(start[0]), float(start[1])

    points: List[Point] = []
    for i in range(total_steps + 1):
        offset = sign * i * step_progress
        if axis == "x":
            points.append(clamp_point(sx + offset, sy, bounds))
        else:
            points.append(clamp_point(sx, sy + offset, bounds))
    return points


def build_linear_path(
    start: Tuple[float, float],
    total_steps: int,
    distance_meters: float,
    pixels_per_meter: float,
    heading: Heading,
    bounds: ClampBounds,
    image_dimensions: ImageDimensions,
    allowed_deviation: float,
) -> PathGeometry:
    """Build a straight corridor path from physical measurements.

    stepCalibration and stepProgress are derived here and nowhere else:
      stepCalibration = distance_meters / total_steps
      stepProgress    = pixels_per_meter * stepCalibration
    """
    step_calibration = distance_meters / total_steps
    step_progress = pixels_per_meter * step_calibration
    points = generate_points(start, total_steps, step_progress, heading, bounds)

    first, last = points[0], points[-1]
    path_string = f"M{first.x:g},{first.y:g} L{last.x:g},{last.y:g}"

    return PathGeometry(
        image_dimensions=image_dimensions,
        points=points,
        path_string=path_string,
        clamp_bounds=bounds,
        step_calibration=step_calibration,
        pixels_per_meter=pixels_per_meter,
        step_progress=step_progress,
        allowed_deviation=allowed_deviation,
    )
