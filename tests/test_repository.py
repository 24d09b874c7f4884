import json
import logging
import math

import pytest

from helpers import FlakyStore, circle, square
from zonemap_geometry import LatLng, normalize_shape
from zonemap_store import (
    ColorTag,
    MemoryStore,
    NotFoundError,
    OverlapError,
    RepositoryConfig,
    ValidationError,
    Zone,
    ZoneRepository,
)
from zonemap_store.logging import JSONFormatter


def _stored(store, key="parking-zones"):
    return json.loads(store.get(key))


def test_create_list_delete_round_trip(repository: ZoneRepository) -> None:
    zone = repository.create(circle(45.815, 15.9819, 50), {"name": "A", "colorTag": "red"})

    zones = repository.list()
    assert zones == (zone,)
    assert zone.area == pytest.approx(math.pi * 50 ** 2)
    assert zone.centroid == LatLng(45.815, 15.9819)
    assert zone.color_tag is ColorTag.RED
    assert zone.shape_type.value == "circle"

    repository.delete(zone.id)
    assert repository.list() == ()


def test_square_zone_gets_derived_area_and_centroid(repository: ZoneRepository) -> None:
    zone = repository.create(square(0.0, 0.0), {"name": "Lot", "colorTag": "green"})
    assert zone.area == pytest.approx(111.32 * 111.32, rel=0.01)
    assert zone.centroid.lat == pytest.approx(0.0005)
    assert zone.centroid.lng == pytest.approx(0.0005)


def test_overlapping_circle_scenario(repository: ZoneRepository) -> None:
    a = repository.create(circle(45.815, 15.9819, 50), {"name": "A", "colorTag": "blue"})

    with pytest.raises(OverlapError) as excinfo:
        repository.create(circle(45.8151, 15.9820, 50), {"name": "B", "colorTag": "blue"})
    assert excinfo.value.conflict_names == ["A"]
    assert excinfo.value.conflicts == (a,)
    assert repository.list() == (a,)

    b = repository.create(circle(45.820, 15.990, 50), {"name": "B", "colorTag": "blue"})
    assert repository.list() == (a, b)


def test_overlap_error_lists_every_conflict(repository: ZoneRepository) -> None:
    repository.create(square(45.0, 15.0), {"name": "west"})
    repository.create(square(45.0, 15.001), {"name": "east"})
    with pytest.raises(OverlapError) as excinfo:
        repository.create(circle(45.0005, 15.001, 20), {"name": "straddle"})
    assert excinfo.value.conflict_names == ["west", "east"]
    assert "west, east" in str(excinfo.value)


def test_identical_candidate_is_rejected(repository: ZoneRepository) -> None:
    repository.create(square(45.0, 15.0), {"name": "Lot"})
    with pytest.raises(OverlapError):
        repository.create(square(45.0, 15.0), {"name": "Lot again"})


def test_adjacent_zones_are_allowed(repository: ZoneRepository) -> None:
    repository.create(square(45.0, 15.0), {"name": "west"})
    repository.create(square(45.0, 15.001), {"name": "east"})
    assert len(repository) == 2


def test_create_from_normalized_drawing(repository: ZoneRepository) -> None:
    shape = normalize_shape({
        "shapeType": "rectangle",
        "rawCoordinates": [[
            {"lat": 45.0, "lng": 15.0},
            {"lat": 45.001, "lng": 15.0},
            {"lat": 45.001, "lng": 15.001},
            {"lat": 45.0, "lng": 15.001},
        ]],
    })
    zone = repository.create(shape, {"name": "Drawn", "colorTag": "purple"})
    assert zone.shape_type.value == "rectangle"
    assert repository.get(zone.id) == zone


@pytest.mark.parametrize("name", ["", "   ", None, 42])
def test_create_requires_a_name(repository: ZoneRepository, name) -> None:
    with pytest.raises(ValidationError):
        repository.create(square(45.0, 15.0), {"name": name, "colorTag": "red"})
    assert repository.list() == ()


def test_create_rejects_unknown_color(repository: ZoneRepository) -> None:
    with pytest.raises(ValidationError):
        repository.create(square(45.0, 15.0), {"name": "Lot", "colorTag": "orange"})


def test_create_defaults_color_and_trims_name(repository: ZoneRepository) -> None:
    zone = repository.create(square(45.0, 15.0), {"name": "  Lot 7  "})
    assert zone.name == "Lot 7"
    assert zone.color_tag is ColorTag.BLUE


def test_ids_are_unique(repository: ZoneRepository) -> None:
    zones = [
        repository.create(square(45.0, 15.0 + i * 0.002), {"name": f"Lot {i}"})
        for i in range(5)
    ]
    assert len({zone.id for zone in zones}) == 5


def test_update_changes_only_name_and_color(repository: ZoneRepository) -> None:
    zone = repository.create(square(45.0, 15.0), {"name": "Lot", "colorTag": "red"})

    updated = repository.update(zone.id, {
        "name": "Lot North",
        "colorTag": "yellow",
        "area": 1.0,
        "geometry": None,
    })

    assert updated.name == "Lot North"
    assert updated.color_tag is ColorTag.YELLOW
    assert updated.geometry == zone.geometry
    assert updated.area == zone.area
    assert updated.centroid == zone.centroid
    assert updated.created_at == zone.created_at
    assert repository.list() == (updated,)


def test_update_with_empty_name_fails_and_keeps_collection(repository: ZoneRepository) -> None:
    zone = repository.create(square(45.0, 15.0), {"name": "Lot"})
    with pytest.raises(ValidationError):
        repository.update(zone.id, {"name": ""})
    assert repository.list() == (zone,)


def test_update_and_delete_unknown_id(repository: ZoneRepository) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        repository.update("missing", {"name": "x"})
    assert excinfo.value.zone_id == "missing"
    with pytest.raises(NotFoundError):
        repository.delete("missing")
    with pytest.raises(NotFoundError):
        repository.get("missing")


def test_clear(repository: ZoneRepository, store: FlakyStore) -> None:
    repository.create(square(45.0, 15.0), {"name": "one"})
    repository.create(square(46.0, 15.0), {"name": "two"})
    repository.clear()
    assert repository.list() == ()
    assert _stored(store) == []


def test_list_snapshot_is_read_only(repository: ZoneRepository) -> None:
    repository.create(square(45.0, 15.0), {"name": "Lot"})
    snapshot = repository.list()
    with pytest.raises(AttributeError):
        snapshot[0].name = "changed"
    repository.create(square(46.0, 15.0), {"name": "Later"})
    assert len(snapshot) == 1


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def test_every_mutation_persists_full_collection(repository: ZoneRepository, store: FlakyStore) -> None:
    a = repository.create(square(45.0, 15.0), {"name": "A", "colorTag": "red"})
    assert [record["id"] for record in _stored(store)] == [a.id]

    b = repository.create(circle(46.0, 15.0, 25), {"name": "B", "colorTag": "green"})
    repository.update(a.id, {"colorTag": "purple"})
    records = _stored(store)
    assert [record["id"] for record in records] == [a.id, b.id]
    assert records[0]["colorTag"] == "purple"
    assert records[1]["geometry"] == {"center": [46.0, 15.0], "radius": 25.0}

    repository.delete(a.id)
    assert [record["id"] for record in _stored(store)] == [b.id]


def test_persisted_layout(repository: ZoneRepository, store: FlakyStore) -> None:
    zone = repository.create(square(45.0, 15.0), {"name": "Lot", "colorTag": "red"})
    (record,) = _stored(store)
    assert set(record) == {
        "id", "name", "colorTag", "shapeType", "geometry", "area", "centroid", "createdAt",
    }
    assert record["shapeType"] == "rectangle"
    assert len(record["geometry"]["vertices"]) == 4
    assert record["centroid"] == {"lat": zone.centroid.lat, "lng": zone.centroid.lng}


def test_collection_survives_reload(repository: ZoneRepository, store: FlakyStore) -> None:
    repository.create(square(45.0, 15.0), {"name": "A"})
    repository.create(circle(46.0, 15.0, 30), {"name": "B", "colorTag": "yellow"})

    reloaded = ZoneRepository(store)
    assert reloaded.list() == repository.list()


def test_noop_update_does_not_write(repository: ZoneRepository, store: FlakyStore) -> None:
    zone = repository.create(square(45.0, 15.0), {"name": "Lot", "colorTag": "red"})
    writes = store.writes
    assert repository.update(zone.id, {"name": "Lot", "colorTag": "red"}) == zone
    assert store.writes == writes


@pytest.mark.parametrize(
    "stored",
    [
        "not json at all",
        '{"zones": []}',
        '[{"id": "x", "name": "broken"}]',
        '[{"id": "x", "name": "bad", "colorTag": "red", "shapeType": "polygon",'
        ' "geometry": {"vertices": [[45, 15], [45, 15.001]]}, "area": 0,'
        ' "centroid": {"lat": 45, "lng": 15}, "createdAt": "2025-01-01T00:00:00"}]',
    ],
)
def test_corrupt_storage_starts_empty(stored: str) -> None:
    store = MemoryStore({"parking-zones": stored})
    repository = ZoneRepository(store)
    assert repository.list() == ()


def test_deeply_nested_storage_starts_empty() -> None:
    store = MemoryStore({"parking-zones": "[" * 100_000 + "]" * 100_000})
    assert ZoneRepository(store).list() == ()


def _stored_record(**changes):
    zone = ZoneRepository(MemoryStore()).create(square(45.0, 15.0), {"name": "Lot"})
    return {**zone.to_dict(), **changes}


@pytest.mark.parametrize(
    "records",
    [
        [_stored_record(name="")],
        [_stored_record(name="   ")],
        [_stored_record(area=1.0)],
        [_stored_record(centroid={"lat": 46.0, "lng": 15.0})],
        [_stored_record(id="x"), _stored_record(id="x")],
    ],
    ids=["empty-name", "blank-name", "wrong-area", "wrong-centroid", "duplicate-id"],
)
def test_stored_records_breaking_zone_invariants_start_empty(records) -> None:
    store = MemoryStore({"parking-zones": json.dumps(records)})
    assert ZoneRepository(store).list() == ()


def test_valid_stored_records_load() -> None:
    records = [_stored_record(id="x"), _stored_record(id="y")]
    store = MemoryStore({"parking-zones": json.dumps(records)})
    assert [zone.id for zone in ZoneRepository(store).list()] == ["x", "y"]


def test_failed_write_keeps_memory_and_previous_durable_copy(
    repository: ZoneRepository, store: FlakyStore
) -> None:
    a = repository.create(square(45.0, 15.0), {"name": "A"})
    durable = store.get("parking-zones")

    store.fail_writes = True
    b = repository.create(square(46.0, 15.0), {"name": "B"})
    assert repository.list() == (a, b)
    assert repository.is_dirty
    assert store.get("parking-zones") == durable

    store.fail_writes = False
    c = repository.create(square(47.0, 15.0), {"name": "C"})
    assert not repository.is_dirty
    assert [record["id"] for record in _stored(store)] == [a.id, b.id, c.id]


def test_flush_retries_pending_write(repository: ZoneRepository, store: FlakyStore) -> None:
    store.fail_writes = True
    repository.create(square(45.0, 15.0), {"name": "A"})
    assert repository.flush() is False

    store.fail_writes = False
    assert repository.flush() is True
    assert len(_stored(store)) == 1


def test_file_backed_repository_from_config(tmp_path) -> None:
    config = RepositoryConfig(storage_dir=tmp_path / "zones", storage_key="lots")
    repository = ZoneRepository.from_config(config)
    zone = repository.create(circle(45.815, 15.9819, 50), {"name": "A"})

    assert (tmp_path / "zones" / "lots.json").exists()
    assert ZoneRepository.from_config(config).list() == (zone,)


def test_zone_dict_round_trip() -> None:
    zone = ZoneRepository(MemoryStore()).create(square(45.0, 15.0), {"name": "Lot"})
    assert Zone.from_dict(json.loads(json.dumps(zone.to_dict()))) == zone


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _events(caplog):
    formatter = JSONFormatter()
    return [
        json.loads(formatter.format(record))
        for record in caplog.records
        if record.name == "zonemap_store.repository"
    ]


def test_mutations_and_rejections_are_logged(repository: ZoneRepository, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="zonemap_store.repository"):
        zone = repository.create(square(45.0, 15.0), {"name": "A"})
        with pytest.raises(OverlapError):
            repository.create(square(45.0, 15.0), {"name": "B"})
        repository.delete(zone.id)

    events = _events(caplog)
    assert [entry["event"] for entry in events] == [
        "zone.created",
        "zone.overlap_rejected",
        "zone.deleted",
    ]
    assert events[1]["metadata"]["conflicts"] == ["A"]
    assert all(entry["component"] == "repository" for entry in events)


def test_write_failure_is_logged_not_raised(repository: ZoneRepository, store: FlakyStore, caplog) -> None:
    store.fail_writes = True
    with caplog.at_level(logging.INFO, logger="zonemap_store.repository"):
        repository.create(square(45.0, 15.0), {"name": "A"})

    errors = [entry for entry in _events(caplog) if entry["level"] == "ERROR"]
    assert [entry["event"] for entry in errors] == ["error.store_write"]
    assert errors[0]["exception"]["type"] == "StorageError"
    assert errors[0]["metadata"] == {"key": "parking-zones", "count": 1}


def test_corrupt_storage_is_logged() -> None:
    store = MemoryStore({"parking-zones": "{{{"})
    records = []

    class Collect(logging.Handler):
        def emit(self, record):
            records.append(json.loads(JSONFormatter().format(record)))

    handler = Collect()
    logger = logging.getLogger("zonemap_store.repository")
    logger.addHandler(handler)
    try:
        ZoneRepository(store)
    finally:
        logger.removeHandler(handler)

    assert [entry["event"] for entry in records] == ["error.store_load"]
    assert records[0]["metadata"] == {"key": "parking-zones"}
    assert records[0]["exception"]["type"] == "JSONDecodeError"
    assert "Traceback" in records[0]["exception"]["traceback"]
