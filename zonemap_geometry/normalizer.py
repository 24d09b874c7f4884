"""
Shape Normalizer
================

Turns raw drawing-surface output into canonical shapes.

The drawing surface hands over coordinates in whatever nesting it uses
internally: a polygon ring may be wrapped in one or more groups, and points
may be [lat, lng] pairs or {"lat": .., "lng": ..} mappings. Everything is
flattened (in order) into a single vertex ring.

Design:
- Pure function, no side effects
- Bounded recursion (MAX_NESTING_DEPTH) - fail fast on hostile input
- Every failure is a MalformedShapeError
"""

from numbers import Real
from typing import Any, List, Mapping

from zonemap_geometry.shapes import (
    Circle,
    LatLng,
    MalformedShapeError,
    Polygon,
    Rectangle,
    Shape,
    ShapeType,
)


MAX_NESTING_DEPTH = 8


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _as_point(value: Any) -> LatLng | None:
    """Return a LatLng if value is a leaf point, None if it is a group."""
    if isinstance(value, Mapping):
        if "lat" in value and "lng" in value:
            lat, lng = value["lat"], value["lng"]
            if not (_is_number(lat) and _is_number(lng)):
                raise MalformedShapeError(f"Non-numeric coordinate: {dict(value)}")
            return LatLng(float(lat), float(lng))
        raise MalformedShapeError(f"Point mapping needs 'lat' and 'lng' keys, got {sorted(value)}")

    if isinstance(value, (list, tuple)):
        if len(value) == 2 and all(_is_number(v) for v in value):
            return LatLng(float(value[0]), float(value[1]))
        return None

    raise MalformedShapeError(f"Unexpected coordinate value: {value!r}")


def _flatten(value: Any, depth: int, out: List[LatLng]) -> None:
    if depth > MAX_NESTING_DEPTH:
        raise MalformedShapeError(
            f"Coordinates nested deeper than {MAX_NESTING_DEPTH} levels"
        )

    point = _as_point(value)
    if point is not None:
        out.append(point)
        return

    for item in value:
        _flatten(item, depth + 1, out)


def flatten_coordinates(raw: Any) -> List[LatLng]:
    """
    Flatten arbitrarily nested coordinate groups into an ordered point list.

    Args:
        raw: A point, or nested lists/tuples of points

    Returns:
        Points in their original (winding) order

    Raises:
        MalformedShapeError: On non-numeric values or excessive nesting
    """
    points: List[LatLng] = []
    _flatten(raw, 0, points)
    return points


def _close_ring(points: List[LatLng]) -> List[LatLng]:
    # Rings are stored open; a repeated closing vertex is implied.
    if len(points) > 1 and points[0] == points[-1]:
        return points[:-1]
    return points


def normalize_shape(raw: Mapping[str, Any]) -> Shape:
    """
    Normalize a raw shape description to a canonical shape.

    Args:
        raw: {"shapeType": "polygon"|"rectangle"|"circle",
              "rawCoordinates": nested points,
              "radius": meters (circles only)}

    Returns:
        Polygon, Rectangle or Circle

    Raises:
        MalformedShapeError: If the input cannot describe a valid shape
    """
    shape_type_value = raw.get("shapeType", raw.get("shape_type"))
    try:
        shape_type = ShapeType(shape_type_value)
    except ValueError:
        raise MalformedShapeError(f"Unknown shape type: {shape_type_value!r}") from None

    coordinates = raw.get("rawCoordinates", raw.get("coordinates"))
    if coordinates is None:
        raise MalformedShapeError("Missing rawCoordinates")

    points = flatten_coordinates(coordinates)

    if shape_type is ShapeType.CIRCLE:
        if len(points) != 1:
            raise MalformedShapeError(
                f"Circle needs exactly one center point, got {len(points)}"
            )
        radius = raw.get("radius")
        if not _is_number(radius):
            raise MalformedShapeError(f"Circle radius must be a number, got {radius!r}")
        return Circle(center=points[0], radius=radius)

    vertices = tuple(_close_ring(points))
    if shape_type is ShapeType.RECTANGLE:
        return Rectangle(vertices=vertices)
    if shape_type is ShapeType.POLYGON:
        return Polygon(vertices=vertices)
    raise TypeError(f"Unsupported shape type: {shape_type}")
