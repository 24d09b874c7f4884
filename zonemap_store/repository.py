"""
Zone Repository - authoritative zone collection.

This module provides ZoneRepository, the sole owner of the zone
collection. It enforces identity and non-overlap at creation and keeps a
durable copy in a key-value store.

Persistence:
- Every successful mutation marks the collection dirty and writes the
  whole collection (JSON array) under one key before returning
- Write failures are logged, not raised; the collection stays dirty and
  the next mutation retries a full write
- On startup, missing or corrupt stored data yields an empty collection

Thread Safety:
- threading.RLock around every read-check-write sequence, so the overlap
  check in create() and the insert happen as one critical section
- Zones are immutable (frozen dataclass); list() hands out a tuple snapshot
"""

import json
import threading
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from zonemap_geometry import (
    DEFAULT_TOLERANCE_M,
    Shape,
    compute_area,
    compute_centroid,
    detect_overlap,
)
from zonemap_store.config import DEFAULT_STORAGE_KEY, RepositoryConfig
from zonemap_store.errors import NotFoundError, OverlapError, StorageError, ValidationError
from zonemap_store.logging import LogEvent, StructuredLogger
from zonemap_store.storage import JsonFileStore, KeyValueStore
from zonemap_store.zone import DEFAULT_COLOR, ColorTag, Zone, clean_name, utc_now_iso


def _parse_color(color: Any) -> ColorTag:
    try:
        return ColorTag(color)
    except ValueError:
        raise ValidationError(
            f"Invalid color tag: {color!r}. "
            f"Must be one of {[c.value for c in ColorTag]}"
        ) from None


def _color_from(metadata: Mapping[str, Any]) -> Optional[Any]:
    return metadata.get("colorTag", metadata.get("color_tag"))


class ZoneRepository:
    """
    Owns the zone collection and its durable copy.

    Usage:
        repository = ZoneRepository(JsonFileStore(Path("./data")))

        shape = normalize_shape({"shapeType": "circle",
                                 "rawCoordinates": [[45.815, 15.9819]],
                                 "radius": 50})
        zone = repository.create(shape, {"name": "Lot A", "colorTag": "red"})

        repository.update(zone.id, {"name": "Lot A (north)"})
        repository.delete(zone.id)
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        tolerance_m: float = DEFAULT_TOLERANCE_M,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Load the collection from the store.

        Args:
            store: Durable key-value store
            key: Storage key holding the serialized collection
            tolerance_m: Boundary tolerance for overlap checks (meters)
            logger: Structured logger (default: component "repository");
                    records are bound to the storage key
        """
        self._store = store
        self._key = key
        self._tolerance_m = tolerance_m
        self._logger = (logger or StructuredLogger(component="repository")).bind(key=key)
        self._lock = threading.RLock()
        self._zones: List[Zone] = self._load()
        self._dirty = False

    @classmethod
    def from_config(cls, config: RepositoryConfig) -> "ZoneRepository":
        """Build a file-backed repository from configuration."""
        return cls(
            store=JsonFileStore(config.storage_dir),
            key=config.storage_key,
            tolerance_m=config.overlap_tolerance_m,
            logger=StructuredLogger(component="repository", level=config.log_level_value),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> List[Zone]:
        try:
            raw = self._store.get(self._key)
            if raw is None:
                return []
            records = json.loads(raw)
            if not isinstance(records, list):
                raise ValueError(f"Expected a JSON array, got {type(records).__name__}")
            zones = [Zone.from_dict(record) for record in records]
            if len({zone.id for zone in zones}) != len(zones):
                raise ValueError("Duplicate zone ids in stored collection")
        except (StorageError, ValueError, RecursionError) as e:
            # json.JSONDecodeError and MalformedShapeError are ValueErrors;
            # pathologically nested JSON exhausts the decoder's recursion
            self._logger.warning(
                event=LogEvent.STORE_LOAD_ERROR,
                message="Stored zones unreadable, starting empty",
                exc_info=e,
            )
            return []

        self._logger.info(
            event=LogEvent.STORE_LOADED,
            message="Zones loaded",
            metadata={'count': len(zones)},
        )
        return zones

    def _persist(self) -> bool:
        """Write the full collection if dirty. Caller holds the lock."""
        if not self._dirty:
            return True

        payload = json.dumps([zone.to_dict() for zone in self._zones])
        try:
            self._store.set(self._key, payload)
        except (StorageError, OSError) as e:
            self._logger.error(
                event=LogEvent.STORE_WRITE_ERROR,
                message="Failed to persist zones, keeping in-memory state",
                metadata={'count': len(self._zones)},
                exc_info=e,
            )
            return False

        self._dirty = False
        self._logger.debug(
            event=LogEvent.STORE_PERSISTED,
            message="Zones persisted",
            metadata={'count': len(self._zones)},
        )
        return True

    def flush(self) -> bool:
        """
        Retry a pending write.

        Returns:
            True if the durable copy matches the in-memory collection
        """
        with self._lock:
            return self._persist()

    @property
    def is_dirty(self) -> bool:
        """True while the last write failed and has not been retried."""
        with self._lock:
            return self._dirty

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> Tuple[Zone, ...]:
        """Snapshot of all zones in insertion order."""
        with self._lock:
            return tuple(self._zones)

    def get(self, zone_id: str) -> Zone:
        """
        Raises:
            NotFoundError: If zone_id is unknown
        """
        with self._lock:
            return self._zones[self._index_of(zone_id)]

    def _index_of(self, zone_id: str) -> int:
        for index, zone in enumerate(self._zones):
            if zone.id == zone_id:
                return index
        raise NotFoundError(zone_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._zones)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, candidate: Shape, metadata: Mapping[str, Any]) -> Zone:
        """
        Store a new zone.

        Args:
            candidate: Canonical shape (see normalize_shape)
            metadata: {"name": str, "colorTag": str} (colorTag optional)

        Returns:
            The stored Zone

        Raises:
            ValidationError: Empty name or unknown color
            OverlapError: Candidate overlaps stored zones (no mutation)
        """
        name = clean_name(metadata.get("name"))
        color = _color_from(metadata)
        color_tag = DEFAULT_COLOR if color is None else _parse_color(color)

        with self._lock:
            result = detect_overlap(candidate, tuple(self._zones), self._tolerance_m)
            if result.overlaps:
                self._logger.warning(
                    event=LogEvent.ZONE_OVERLAP_REJECTED,
                    message="Candidate overlaps existing zones",
                    metadata={
                        'name': name,
                        'shape_type': candidate.shape_type.value,
                        'conflicts': result.conflict_names,
                    },
                )
                raise OverlapError(result.conflicts)

            zone = Zone(
                id=uuid.uuid4().hex,
                name=name,
                color_tag=color_tag,
                geometry=candidate,
                area=compute_area(candidate),
                centroid=compute_centroid(candidate),
                created_at=utc_now_iso(),
            )
            self._zones.append(zone)
            self._dirty = True
            self._persist()

        self._logger.info(
            event=LogEvent.ZONE_CREATED,
            message="Zone created",
            metadata={
                'zone_id': zone.id,
                'name': zone.name,
                'shape_type': zone.shape_type.value,
                'area_m2': round(zone.area, 2),
            },
        )
        return zone

    def update(self, zone_id: str, changes: Mapping[str, Any]) -> Zone:
        """
        Change a zone's name and/or color; all other keys are ignored.

        Returns:
            The updated Zone

        Raises:
            NotFoundError: If zone_id is unknown
            ValidationError: Empty name or unknown color
        """
        fields: Dict[str, Any] = {}
        if "name" in changes:
            fields["name"] = clean_name(changes["name"])
        color = _color_from(changes)
        if color is not None:
            fields["color_tag"] = _parse_color(color)

        with self._lock:
            index = self._index_of(zone_id)
            current = self._zones[index]
            updated = replace(current, **fields)
            if updated == current:
                return current

            self._zones[index] = updated
            self._dirty = True
            self._persist()

        self._logger.info(
            event=LogEvent.ZONE_UPDATED,
            message="Zone updated",
            metadata={'zone_id': zone_id, 'fields': sorted(fields)},
        )
        return updated

    def delete(self, zone_id: str) -> None:
        """
        Raises:
            NotFoundError: If zone_id is unknown
        """
        with self._lock:
            removed = self._zones.pop(self._index_of(zone_id))
            self._dirty = True
            self._persist()

        self._logger.info(
            event=LogEvent.ZONE_DELETED,
            message="Zone deleted",
            metadata={'zone_id': zone_id, 'name': removed.name},
        )

    def clear(self) -> None:
        """Remove every zone."""
        with self._lock:
            count = len(self._zones)
            self._zones = []
            self._dirty = True
            self._persist()

        self._logger.info(
            event=LogEvent.ZONE_CLEARED,
            message="All zones cleared",
            metadata={'count': count},
        )
