"""
Zone store errors.

Every error is raised before the collection is touched, so a failed
operation never leaves a partial mutation behind.
"""

from typing import List, Sequence


class ZoneStoreError(Exception):
    """Base class for zone store failures."""
    pass


class ValidationError(ZoneStoreError):
    """Raised when zone metadata (name, color) is missing or invalid."""
    pass


class NotFoundError(ZoneStoreError):
    """Raised when an operation references an unknown zone id."""

    def __init__(self, zone_id: str):
        super().__init__(f"Zone '{zone_id}' not found")
        self.zone_id = zone_id


class OverlapError(ZoneStoreError):
    """
    Raised when a candidate shape overlaps stored zones.

    Attributes:
        conflicts: Conflicting zones, in collection order
    """

    def __init__(self, conflicts: Sequence):
        self.conflicts = tuple(conflicts)
        super().__init__(
            f"Zone overlaps with: {', '.join(self.conflict_names)}"
        )

    @property
    def conflict_names(self) -> List[str]:
        return [zone.name for zone in self.conflicts]


class StorageError(ZoneStoreError):
    """Raised by key-value stores when a read or write fails."""
    pass
