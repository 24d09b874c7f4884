"""
Geometry Engine
===============

Stateless geometry over canonical shapes: area, centroid, bounds and
pairwise overlap.

Design:
- Pure functions (no state, no I/O)
- Every metric computation runs in a LocalProjection (planar meters),
  planar work is delegated to shapely
- Dispatch over the closed shape set; unknown shapes raise TypeError
- Touching is NOT overlapping: all comparisons are strict and shrink by a
  sub-meter tolerance so shapes sharing a drawn boundary never conflict
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Tuple

from shapely.geometry import Point
from shapely.geometry import Polygon as PlanarPolygon

from zonemap_geometry.projection import LocalProjection, METERS_PER_DEGREE
from zonemap_geometry.shapes import Circle, LatLng, Polygon, Rectangle, Shape


DEFAULT_TOLERANCE_M = 0.1

# Below this (m^2) a vertex ring is treated as degenerate
_DEGENERATE_AREA_M2 = 1e-6

# Tolerance never exceeds this fraction of a shape's clearance
_TOLERANCE_CLEARANCE_RATIO = 0.25


class HasGeometry(Protocol):
    """Anything named that carries a canonical shape (e.g. Zone)."""

    @property
    def name(self) -> str:
        ...

    @property
    def geometry(self) -> Shape:
        ...


def _unsupported(shape: object) -> TypeError:
    return TypeError(f"Unsupported shape: {type(shape).__name__}")


def _planar(shape: Shape, projection: LocalProjection) -> PlanarPolygon:
    return PlanarPolygon(projection.to_xy(shape.vertices))


# ---------------------------------------------------------------------------
# Area / centroid / bounds
# ---------------------------------------------------------------------------

def compute_area(shape: Shape) -> float:
    """
    Area in square meters.

    Circles use pi * r^2. Vertex shapes are measured in a local projection
    around their mean latitude; collinear rings yield 0.
    """
    if isinstance(shape, Circle):
        return math.pi * shape.radius ** 2
    if isinstance(shape, (Polygon, Rectangle)):
        area = _planar(shape, LocalProjection.around(shape.vertices)).area
        return 0.0 if area < _DEGENERATE_AREA_M2 else area
    raise _unsupported(shape)


def compute_centroid(shape: Shape) -> LatLng:
    """
    Geometric center of a shape.

    Circles return their center. Vertex shapes use the area-weighted polygon
    centroid, falling back to the vertex mean when the ring is degenerate.
    """
    if isinstance(shape, Circle):
        return shape.center
    if isinstance(shape, (Polygon, Rectangle)):
        projection = LocalProjection.around(shape.vertices)
        planar = _planar(shape, projection)
        if planar.area < _DEGENERATE_AREA_M2:
            return projection.origin
        centroid = planar.centroid
        return projection.to_latlng(centroid.x, centroid.y)
    raise _unsupported(shape)


def compute_bounds(shape: Shape) -> Tuple[LatLng, LatLng]:
    """
    Bounding box as (south_west, north_east).

    Used by renderers to fit the map view to a zone.
    """
    if isinstance(shape, Circle):
        lat_delta = shape.radius / METERS_PER_DEGREE
        lng_delta = shape.radius / LocalProjection(origin=shape.center).meters_per_degree_lng
        return (
            LatLng(shape.center.lat - lat_delta, shape.center.lng - lng_delta),
            LatLng(shape.center.lat + lat_delta, shape.center.lng + lng_delta),
        )
    if isinstance(shape, (Polygon, Rectangle)):
        lats = [v.lat for v in shape.vertices]
        lngs = [v.lng for v in shape.vertices]
        return LatLng(min(lats), min(lngs)), LatLng(max(lats), max(lngs))
    raise _unsupported(shape)


# ---------------------------------------------------------------------------
# Overlap
# ---------------------------------------------------------------------------

def _anchor(shape: Shape) -> LatLng:
    if isinstance(shape, Circle):
        return shape.center
    if isinstance(shape, (Polygon, Rectangle)):
        lats = [v.lat for v in shape.vertices]
        lngs = [v.lng for v in shape.vertices]
        return LatLng(sum(lats) / len(lats), sum(lngs) / len(lngs))
    raise _unsupported(shape)


def _to_planar(shape: Shape, projection: LocalProjection):
    """Circle centers become points, vertex shapes become polygons."""
    if isinstance(shape, Circle):
        return Point(projection.point_to_xy(shape.center))
    return _planar(shape, projection)


def _clearance(shape: Shape, planar) -> float:
    """
    Characteristic half-width in meters.

    Circles use their radius; rings use 2 * area / perimeter, which is the
    inradius of any tangential polygon and 0 for a degenerate ring.
    """
    if isinstance(shape, Circle):
        return shape.radius
    if planar.length == 0.0:
        return 0.0
    return 2.0 * planar.area / planar.length


def _circles_overlap(a: Point, ra: float, b: Point, rb: float, tolerance: float) -> bool:
    return a.distance(b) < ra + rb - tolerance


def _circle_polygon_overlap(
    center: Point, radius: float, polygon: PlanarPolygon, tolerance: float
) -> bool:
    edge_distance = center.distance(polygon.exterior)

    # Circle center inside polygon
    if polygon.contains(center) and edge_distance > tolerance:
        return True

    # Polygon boundary passes through the circle (covers vertex-inside too)
    return edge_distance < radius - tolerance


def _polygons_overlap(a: PlanarPolygon, b: PlanarPolygon, tolerance: float) -> bool:
    # Shrinking both sides turns shared edges and corners into gaps while
    # identical, contained and edge-aligned interiors still meet
    return a.buffer(-tolerance).intersects(b.buffer(-tolerance))


def shapes_overlap(a: Shape, b: Shape, tolerance_m: float = DEFAULT_TOLERANCE_M) -> bool:
    """
    Check whether two shapes' interiors overlap.

    The pair is projected around the midpoint of both shapes' anchors, so
    shapes_overlap(a, b) == shapes_overlap(b, a). The tolerance is capped at
    a quarter of the smaller shape's clearance, so a shape narrower than the
    tolerance still overlaps an identical copy of itself.

    Args:
        a: First shape
        b: Second shape
        tolerance_m: Boundary tolerance in meters

    Returns:
        True if the shapes overlap by more than the tolerance
    """
    # _anchor rejects anything outside the closed shape set
    projection = LocalProjection.around([_anchor(a), _anchor(b)])

    planar_a = _to_planar(a, projection)
    planar_b = _to_planar(b, projection)
    tolerance = min(
        tolerance_m,
        _TOLERANCE_CLEARANCE_RATIO * min(_clearance(a, planar_a), _clearance(b, planar_b)),
    )

    a_is_circle = isinstance(a, Circle)
    b_is_circle = isinstance(b, Circle)
    if a_is_circle and b_is_circle:
        return _circles_overlap(planar_a, a.radius, planar_b, b.radius, tolerance)
    if a_is_circle:
        return _circle_polygon_overlap(planar_a, a.radius, planar_b, tolerance)
    if b_is_circle:
        return _circle_polygon_overlap(planar_b, b.radius, planar_a, tolerance)
    return _polygons_overlap(planar_a, planar_b, tolerance)


@dataclass(frozen=True)
class OverlapResult:
    """
    Outcome of checking a candidate against existing zones.

    Attributes:
        overlaps: True if at least one conflict was found
        conflicts: Conflicting zones, in the order they were given
    """

    overlaps: bool
    conflicts: Tuple[HasGeometry, ...]

    @property
    def conflict_names(self) -> List[str]:
        return [zone.name for zone in self.conflicts]


def detect_overlap(
    candidate: Shape,
    existing_zones: Iterable[HasGeometry],
    tolerance_m: float = DEFAULT_TOLERANCE_M,
) -> OverlapResult:
    """
    Check a candidate shape against every existing zone.

    Every zone is evaluated (no early exit) so callers can report all
    conflicts at once.

    Args:
        candidate: Canonical shape to test
        existing_zones: Zones (anything with `name` and `geometry`)
        tolerance_m: Boundary tolerance in meters

    Returns:
        OverlapResult with conflicts in input order
    """
    conflicts = tuple(
        zone for zone in existing_zones
        if shapes_overlap(candidate, zone.geometry, tolerance_m)
    )
    return OverlapResult(overlaps=bool(conflicts), conflicts=conflicts)
