"""
Read-side helpers for zone lists.

Used by list/filter views on top of ZoneRepository.list(). All helpers
take and return plain sequences and never touch the repository.
"""

from typing import Iterable, List

from zonemap_store.zone import ColorTag, Zone


def filter_by_colors(zones: Iterable[Zone], colors: Iterable) -> List[Zone]:
    """Keep zones whose color tag is among the selected colors."""
    selected = {ColorTag(c) for c in colors}
    return [zone for zone in zones if zone.color_tag in selected]


def search_by_name(zones: Iterable[Zone], query: str) -> List[Zone]:
    """Case-insensitive substring match; a blank query matches everything."""
    needle = query.strip().lower()
    if not needle:
        return list(zones)
    return [zone for zone in zones if needle in zone.name.lower()]


def sort_zones(zones: Iterable[Zone], by: str = "date") -> List[Zone]:
    """
    Sort zones for display.

    Args:
        zones: Zones to sort
        by: "date" (newest first) or "name" (case-insensitive A-Z)

    Raises:
        ValueError: If by is not a known sort key
    """
    if by == "date":
        return sorted(zones, key=lambda zone: zone.created_at, reverse=True)
    if by == "name":
        return sorted(zones, key=lambda zone: zone.name.casefold())
    raise ValueError(f"Invalid sort key: {by}. Must be 'date' or 'name'")


def format_area(area_m2: float) -> str:
    """Human-readable area: whole m² below 1 km², km² with two decimals above."""
    if area_m2 >= 1_000_000:
        return f"{area_m2 / 1_000_000:.2f} km²"
    return f"{round(area_m2)} m²"
