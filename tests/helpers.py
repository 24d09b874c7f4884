from __future__ import annotations

from zonemap_geometry import Circle, LatLng, Polygon, Rectangle
from zonemap_store import MemoryStore, StorageError


def square(lat: float, lng: float, size: float = 0.001, cls=Rectangle):
    """Axis-aligned square with its south-west corner at (lat, lng)."""
    return cls(vertices=(
        LatLng(lat, lng),
        LatLng(lat, lng + size),
        LatLng(lat + size, lng + size),
        LatLng(lat + size, lng),
    ))


def box(south: float, west: float, north: float, east: float, cls=Polygon):
    return cls(vertices=(
        LatLng(south, west),
        LatLng(south, east),
        LatLng(north, east),
        LatLng(north, west),
    ))


def circle(lat: float, lng: float, radius: float) -> Circle:
    return Circle(center=LatLng(lat, lng), radius=radius)


class FlakyStore(MemoryStore):
    """MemoryStore whose writes can be switched off."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False
        self.writes = 0

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        self.writes += 1
        super().set(key, value)
