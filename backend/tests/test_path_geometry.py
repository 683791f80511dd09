import pytest
from pydantic import ValidationError

from raahvia.schemas.navigation import ClampBounds, ImageDimensions, PathGeometry, Point
from raahvia.services.path_geometry import build_linear_path, generate_points

BOUNDS = ClampBounds(min_x=0, max_x=100, min_y=0, max_y=100)


def test_generate_points_right():
    pts = generate_points((10, 50), total_steps=4, step_progress=5.0, heading="right", bounds=BOUNDS)
    assert [(p.x, p.y) for p in pts] == [(10, 50), (15, 50), (20, 50), (25, 50), (30, 50)]


def test_generate_points_clamps_overshoot():
    pts = generate_points((50, 10), total_steps=3, step_progress=6.0, heading="up", bounds=BOUNDS)
    assert [p.y for p in pts] == [10, 4, 0, 0]


def test_generate_points_rejects_zero_steps():
    with pytest.raises(ValueError):
        generate_points((0, 0), total_steps=0, step_progress=1.0, heading="down", bounds=BOUNDS)


def test_build_linear_path_derives_calibration():
    geom = build_linear_path(
        start=(20, 90),
        total_steps=10,
        distance_meters=7.0,
        pixels_per_meter=10.0,
        heading="up",
        bounds=ClampBounds(min_x=15, max_x=25, min_y=20, max_y=90),
        image_dimensions=ImageDimensions(width=100, height=100),
        allowed_deviation=12,
    )
    assert geom.step_calibration == pytest.approx(0.7)
    assert geom.step_progress == pytest.approx(7.0)
    assert geom.path_string == "M20,90 L20,20"
    assert len(geom.points) == 11


def _geometry(**overrides):
    data = dict(
        image_dimensions={"width": 300, "height": 300},
        points=[{"x": 150, "y": 280}, {"x": 150, "y": 274.3}],
        path_string="M150,280 L150,40",
        clamp_bounds={"minX": 145, "maxX": 155, "minY": 40, "maxY": 280},
        step_calibration=0.7619,
        pixels_per_meter=7.5,
        step_progress=5.714,
        allowed_deviation=25,
    )
    data.update(overrides)
    return PathGeometry.model_validate(data)


def test_geometry_accepts_rounded_constants():
    assert _geometry().step_progress == 5.714


def test_geometry_rejects_point_outside_bounds():
    with pytest.raises(ValidationError):
        _geometry(points=[{"x": 150, "y": 280}, {"x": 170, "y": 270}])


def test_geometry_rejects_inconsistent_step_progress():
    with pytest.raises(ValidationError):
        _geometry(step_progress=20.0)


def test_clamp_bounds_must_be_ordered():
    with pytest.raises(ValidationError):
        ClampBounds(min_x=10, max_x=0, min_y=0, max_y=1)


def test_bounds_contains():
    assert BOUNDS.contains(Point(x=0, y=100))
    assert not BOUNDS.contains(Point(x=-0.1, y=5))
