"""
Geometry Layer
==============

Bounded Context: Pure geometry for map zones.

Responsibilities:
- Canonical shape representation (Polygon, Rectangle, Circle)
- Normalization of raw drawing-surface coordinates
- Area, centroid, bounds and overlap computation
- NO state, NO persistence, NO logging

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Fail-fast validation (MalformedShapeError)
- Planar local approximation, good for zones up to a few kilometers
"""

from zonemap_geometry.shapes import (
    Circle,
    LatLng,
    MalformedShapeError,
    Polygon,
    Rectangle,
    Shape,
    ShapeType,
)
from zonemap_geometry.normalizer import normalize_shape
from zonemap_geometry.engine import (
    DEFAULT_TOLERANCE_M,
    HasGeometry,
    OverlapResult,
    compute_area,
    compute_bounds,
    compute_centroid,
    detect_overlap,
    shapes_overlap,
)

__all__ = [
    # Shapes
    "Circle",
    "LatLng",
    "MalformedShapeError",
    "Polygon",
    "Rectangle",
    "Shape",
    "ShapeType",
    # Normalization
    "normalize_shape",
    # Engine
    "DEFAULT_TOLERANCE_M",
    "HasGeometry",
    "OverlapResult",
    "compute_area",
    "compute_bounds",
    "compute_centroid",
    "detect_overlap",
    "shapes_overlap",
]
