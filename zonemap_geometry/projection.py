"""
Local Planar Projection
=======================

Equirectangular projection around a reference point.

Zones are small (tens to thousands of meters), so a flat-earth
approximation around the zone is accurate enough for area, centroid and
overlap tests. No ellipsoidal correction is applied.
"""

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from zonemap_geometry.shapes import LatLng


METERS_PER_DEGREE = 111_320.0


@dataclass(frozen=True)
class LocalProjection:
    """
    Maps (lat, lng) degrees to planar (x, y) meters around an origin.

    x grows east, y grows north. Longitude degrees are scaled by
    cos(origin latitude).

    Attributes:
        origin: Reference point mapped to (0, 0)
    """

    origin: LatLng

    @property
    def meters_per_degree_lng(self) -> float:
        return METERS_PER_DEGREE * math.cos(math.radians(self.origin.lat))

    def to_xy(self, points: Iterable[LatLng]) -> np.ndarray:
        """
        Project points to planar meters.

        Returns:
            Nx2 float array of (x, y) meters
        """
        latlng = np.asarray(list(points), dtype=float).reshape(-1, 2)
        x = (latlng[:, 1] - self.origin.lng) * self.meters_per_degree_lng
        y = (latlng[:, 0] - self.origin.lat) * METERS_PER_DEGREE
        return np.column_stack((x, y))

    def point_to_xy(self, point: LatLng) -> np.ndarray:
        return self.to_xy([point])[0]

    def to_latlng(self, x: float, y: float) -> LatLng:
        """Inverse projection of a single planar point."""
        return LatLng(
            lat=self.origin.lat + y / METERS_PER_DEGREE,
            lng=self.origin.lng + x / self.meters_per_degree_lng,
        )

    @classmethod
    def around(cls, points: Iterable[LatLng]) -> "LocalProjection":
        """Projection centered on the arithmetic mean of the given points."""
        latlng = np.asarray(list(points), dtype=float).reshape(-1, 2)
        mean = latlng.mean(axis=0)
        return cls(origin=LatLng(float(mean[0]), float(mean[1])))
