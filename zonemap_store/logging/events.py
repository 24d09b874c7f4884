"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for the zone store's structured logs.

Event Naming Convention:
    <component>.<action>

    component: zone, store, error
    action: created, persisted, store_write, ...

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.zone_id
    | filter event = "zone.overlap_rejected"
    | stats count() by bin(1h)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - zone.*: Zone collection mutations
    - store.*: Durable storage interactions
    - error.*: Error conditions
    """

    # ========== Zone Events ==========
    ZONE_CREATED = "zone.created"
    """New zone stored."""

    ZONE_UPDATED = "zone.updated"
    """Zone name or color changed."""

    ZONE_DELETED = "zone.deleted"
    """Zone removed by id."""

    ZONE_CLEARED = "zone.cleared"
    """Whole collection emptied."""

    ZONE_OVERLAP_REJECTED = "zone.overlap_rejected"
    """Candidate rejected because it overlaps existing zones."""

    # ========== Store Events ==========
    STORE_LOADED = "store.loaded"
    """Collection restored from durable storage."""

    STORE_PERSISTED = "store.persisted"
    """Collection written to durable storage."""

    # ========== Error Events ==========
    STORE_LOAD_ERROR = "error.store_load"
    """Stored collection missing fields or not decodable."""

    STORE_WRITE_ERROR = "error.store_write"
    """Durable write failed; in-memory collection stays authoritative."""
