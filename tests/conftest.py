import pytest

from helpers import FlakyStore
from zonemap_store import ZoneRepository


@pytest.fixture()
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture()
def repository(store: FlakyStore) -> ZoneRepository:
    return ZoneRepository(store)
