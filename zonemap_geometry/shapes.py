"""
Geometric Shapes Module
========================

Canonical shape representations - NO state, NO side effects.

Design:
- Closed set of variants: Polygon, Rectangle, Circle
- Immutable shapes (frozen dataclass pattern)
- Coordinates are (lat, lng) in decimal degrees
- Fail-fast validation in __post_init__
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Tuple, Union


class MalformedShapeError(ValueError):
    """Raised when raw or canonical geometry cannot describe a valid zone."""
    pass


class ShapeType(str, Enum):
    """Shape type enumeration."""
    POLYGON = "polygon"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"


class LatLng(NamedTuple):
    """Geographic point in decimal degrees."""
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


def _validate_point(point: LatLng) -> None:
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise MalformedShapeError(f"Coordinates must be finite, got {tuple(point)}")
    if not -90.0 <= point.lat <= 90.0:
        raise MalformedShapeError(f"Latitude must be in [-90, 90], got {point.lat}")
    if not -180.0 <= point.lng <= 180.0:
        raise MalformedShapeError(f"Longitude must be in [-180, 180], got {point.lng}")


@dataclass(frozen=True)
class _VertexShape:
    """
    Shared validation for vertex-based shapes.

    Attributes:
        vertices: Ordered ring of (lat, lng) points, implicitly closed
                  (the first point is NOT repeated at the end)
    """

    vertices: Tuple[LatLng, ...]

    def __post_init__(self):
        """Coerce vertices to LatLng and validate the ring."""
        vertices = tuple(LatLng(float(v[0]), float(v[1])) for v in self.vertices)
        for vertex in vertices:
            _validate_point(vertex)

        distinct = set(vertices)
        if len(distinct) < 3:
            raise MalformedShapeError(
                f"{type(self).__name__} must have at least 3 distinct vertices, "
                f"got {len(distinct)}"
            )

        object.__setattr__(self, 'vertices', vertices)

    @property
    def edges(self) -> Tuple[Tuple[LatLng, LatLng], ...]:
        """Closed ring edges as (start, end) pairs."""
        count = len(self.vertices)
        return tuple(
            (self.vertices[i], self.vertices[(i + 1) % count])
            for i in range(count)
        )


@dataclass(frozen=True)
class Polygon(_VertexShape):
    """Free-form polygon drawn vertex by vertex."""

    @property
    def shape_type(self) -> ShapeType:
        return ShapeType.POLYGON


@dataclass(frozen=True)
class Rectangle(_VertexShape):
    """Rectangle drawn by dragging; stored as its corner ring."""

    @property
    def shape_type(self) -> ShapeType:
        return ShapeType.RECTANGLE


@dataclass(frozen=True)
class Circle:
    """
    Circle defined by a center point and a radius on the ground.

    Attributes:
        center: (lat, lng) of the circle center
        radius: Radius in meters (> 0)
    """

    center: LatLng
    radius: float

    def __post_init__(self):
        """Validate center and radius."""
        center = LatLng(float(self.center[0]), float(self.center[1]))
        _validate_point(center)

        radius = float(self.radius)
        if not math.isfinite(radius) or radius <= 0:
            raise MalformedShapeError(f"Circle radius must be > 0, got {self.radius}")

        object.__setattr__(self, 'center', center)
        object.__setattr__(self, 'radius', radius)

    @property
    def shape_type(self) -> ShapeType:
        return ShapeType.CIRCLE


Shape = Union[Polygon, Rectangle, Circle]


def shape_to_dict(shape: Shape) -> dict:
    """Serialize canonical geometry (without the shape type tag)."""
    if isinstance(shape, Circle):
        return {"center": [shape.center.lat, shape.center.lng], "radius": shape.radius}
    if isinstance(shape, (Polygon, Rectangle)):
        return {"vertices": [[v.lat, v.lng] for v in shape.vertices]}
    raise TypeError(f"Unsupported shape: {type(shape).__name__}")


def shape_from_dict(shape_type: ShapeType, data: dict) -> Shape:
    """
    Rebuild a canonical shape from its serialized geometry.

    Raises:
        MalformedShapeError: If the geometry does not validate
        KeyError: If required geometry keys are missing
    """
    shape_type = ShapeType(shape_type)
    if shape_type is ShapeType.CIRCLE:
        return Circle(center=LatLng(*data["center"]), radius=data["radius"])
    if shape_type is ShapeType.RECTANGLE:
        return Rectangle(vertices=tuple(LatLng(*v) for v in data["vertices"]))
    if shape_type is ShapeType.POLYGON:
        return Polygon(vertices=tuple(LatLng(*v) for v in data["vertices"]))
    raise TypeError(f"Unsupported shape type: {shape_type}")
