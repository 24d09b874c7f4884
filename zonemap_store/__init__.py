"""
Zone Store
==========

Bounded Context: Authoritative zone collection and its persistence.

Architecture:

    zonemap_store/
    ├── zone.py          # Zone record, ColorTag palette, (de)serialization
    ├── repository.py    # ZoneRepository (CRUD, identity, non-overlap)
    ├── storage.py       # KeyValueStore protocol, JsonFileStore, MemoryStore
    ├── errors.py        # ValidationError, OverlapError, NotFoundError, ...
    ├── config.py        # RepositoryConfig (YAML)
    ├── queries.py       # Filter/search/sort helpers for list views
    └── logging/         # JSON structured logging

Usage:

    from zonemap_geometry import normalize_shape
    from zonemap_store import MemoryStore, OverlapError, ZoneRepository

    repository = ZoneRepository(MemoryStore())
    shape = normalize_shape({
        "shapeType": "circle",
        "rawCoordinates": [[45.815, 15.9819]],
        "radius": 50,
    })

    try:
        zone = repository.create(shape, {"name": "A", "colorTag": "green"})
    except OverlapError as e:
        print(f"Overlaps: {', '.join(e.conflict_names)}")
"""

from zonemap_store.config import RepositoryConfig
from zonemap_store.errors import (
    NotFoundError,
    OverlapError,
    StorageError,
    ValidationError,
    ZoneStoreError,
)
from zonemap_store.queries import filter_by_colors, format_area, search_by_name, sort_zones
from zonemap_store.repository import ZoneRepository
from zonemap_store.storage import JsonFileStore, KeyValueStore, MemoryStore
from zonemap_store.zone import ColorTag, Zone

__all__ = [
    # Records
    "ColorTag",
    "Zone",
    # Repository
    "ZoneRepository",
    "RepositoryConfig",
    # Storage
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    # Errors
    "NotFoundError",
    "OverlapError",
    "StorageError",
    "ValidationError",
    "ZoneStoreError",
    # Queries
    "filter_by_colors",
    "format_area",
    "search_by_name",
    "sort_zones",
]

__version__ = "1.0.0"
