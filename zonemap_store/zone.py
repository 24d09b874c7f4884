"""
Zone Record Schema
==================

Bounded Context: Persisted zone data

Design Principles:
- Immutability: frozen=True, updates produce a new Zone via replace()
- Serialization: to_dict()/from_dict() use the persisted camelCase layout
- Validation: from_dict() rebuilds and re-validates the geometry, the
  name and the derived area/centroid

Persisted layout (one element of the stored JSON array):
    {
        "id": "3f2a...",
        "name": "Lot A",
        "colorTag": "blue",
        "shapeType": "circle",
        "geometry": {"center": [45.815, 15.9819], "radius": 50.0},
        "area": 7853.98,
        "centroid": {"lat": 45.815, "lng": 15.9819},
        "createdAt": "2025-10-24T15:30:45.123456+00:00"
    }
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from zonemap_geometry import LatLng, Shape, ShapeType, compute_area, compute_centroid
from zonemap_geometry.shapes import shape_from_dict, shape_to_dict
from zonemap_store.errors import ValidationError

# ~0.1 mm; stored centroids are re-derived with the same arithmetic
_CENTROID_TOLERANCE_DEG = 1e-9


class ColorTag(str, Enum):
    """Fixed zone color palette."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"

    @property
    def hex(self) -> str:
        """Display color for map renderers."""
        return _COLOR_HEX[self]


_COLOR_HEX = {
    ColorTag.RED: "#ef4444",
    ColorTag.BLUE: "#3b82f6",
    ColorTag.GREEN: "#22c55e",
    ColorTag.YELLOW: "#eab308",
    ColorTag.PURPLE: "#a855f7",
}

DEFAULT_COLOR = ColorTag.BLUE


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def clean_name(name: Any) -> str:
    """
    Trimmed display name.

    Raises:
        ValidationError: If name is not a string or is blank
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Zone name cannot be empty")
    return name.strip()


@dataclass(frozen=True)
class Zone:
    """
    Immutable zone record.

    Only name and color_tag may change over a zone's life; geometry and
    its derived area/centroid are fixed at creation.

    Attributes:
        id: Unique opaque identifier
        name: Non-empty display name
        color_tag: Palette color
        geometry: Canonical shape
        area: Square meters, derived from geometry
        centroid: Derived center point
        created_at: ISO 8601 creation timestamp
    """

    id: str
    name: str
    color_tag: ColorTag
    geometry: Shape
    area: float
    centroid: LatLng
    created_at: str

    @property
    def shape_type(self) -> ShapeType:
        return self.geometry.shape_type

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "id": self.id,
            "name": self.name,
            "colorTag": self.color_tag.value,
            "shapeType": self.shape_type.value,
            "geometry": shape_to_dict(self.geometry),
            "area": self.area,
            "centroid": self.centroid.to_dict(),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Zone':
        """
        Deserialize from dict.

        The name must be non-empty and the stored area/centroid must agree
        with the geometry they were derived from.

        Raises:
            ValueError: If required keys are missing or values are invalid
                        (MalformedShapeError is a ValueError too)
        """
        try:
            zone = cls(
                id=str(data["id"]),
                name=clean_name(data["name"]),
                color_tag=ColorTag(data["colorTag"]),
                geometry=shape_from_dict(ShapeType(data["shapeType"]), data["geometry"]),
                area=float(data["area"]),
                centroid=LatLng(
                    float(data["centroid"]["lat"]),
                    float(data["centroid"]["lng"]),
                ),
                created_at=str(data["createdAt"]),
            )
        except KeyError as e:
            raise ValueError(f"Missing required Zone field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid Zone data: {e}")
        except ValidationError as e:
            raise ValueError(f"Invalid Zone data: {e}")

        if not math.isclose(zone.area, compute_area(zone.geometry), rel_tol=1e-6, abs_tol=1e-6):
            raise ValueError(f"Zone '{zone.id}' area does not match its geometry")
        expected = compute_centroid(zone.geometry)
        if not (
            math.isclose(zone.centroid.lat, expected.lat, abs_tol=_CENTROID_TOLERANCE_DEG)
            and math.isclose(zone.centroid.lng, expected.lng, abs_tol=_CENTROID_TOLERANCE_DEG)
        ):
            raise ValueError(f"Zone '{zone.id}' centroid does not match its geometry")
        return zone
