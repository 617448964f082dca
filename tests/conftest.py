"""Shared fixtures: catalog wiring around an in-memory remote store"""

import pytest

from managers.bulk_pipeline import BulkOperationPipeline
from managers.catalog import Catalog
from managers.delivery import DirectoryDownloadSink, UnsupportedShareTarget
from managers.selection import SelectionSet
from tests.fakes import FakeFetcher, FakeStore, make_record


@pytest.fixture
def records():
    return [
        make_record("a1", title="Front view", tags=["red", "sleeper"], category="Exterior", folder="Deluxe Buses"),
        make_record("b2", title="Dashboard", tags=["interior"], category="Interior", folder="Deluxe Buses"),
        make_record("c3", title="Seats", tags=["Blue"], category="Interior", folder="Sleeper Bus(Spider)"),
        make_record("d4", title="Side", tags=[], category="Exterior", folder=None),
        make_record("e5", title="Misc", tags=[], category=None, folder=None),
    ]


@pytest.fixture
def catalog(records):
    catalog = Catalog()
    catalog.load(records)
    return catalog


@pytest.fixture
def selection(catalog):
    return SelectionSet(catalog)


@pytest.fixture
def store(records):
    return FakeStore(records)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def pipeline(catalog, selection, store, fetcher, tmp_path):
    return BulkOperationPipeline(
        catalog,
        selection,
        store,
        download_sink=DirectoryDownloadSink(tmp_path / "downloads"),
        share_target=UnsupportedShareTarget(),
        fetcher=fetcher,
    )
