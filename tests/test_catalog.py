"""Tests for catalog grouping, search and reconciliation

Run with pytest from project root:
    pytest tests/test_catalog.py -v
"""

import pytest

from managers.catalog import UNGROUPED, Catalog
from tests.fakes import make_record


class TestGrouping:
    """Tests for Catalog.group_by"""

    def test_folder_grouping_partitions_every_record(self, catalog, records):
        """Test every record lands in exactly one folder group"""
        groups = catalog.group_by("folder")
        grouped_ids = [record.asset_id for group in groups.values() for record in group]

        assert sorted(grouped_ids) == sorted(record.asset_id for record in records)
        assert len(grouped_ids) == len(set(grouped_ids))

    def test_missing_folder_falls_back_to_category(self, catalog):
        """Test a record without folder is grouped by its category"""
        groups = catalog.group_by("folder")

        assert [r.asset_id for r in groups["Exterior"]] == ["d4"]

    def test_missing_folder_and_category_is_ungrouped(self, catalog):
        """Test a record with neither key lands in the ungrouped bucket"""
        groups = catalog.group_by("folder")

        assert [r.asset_id for r in groups[UNGROUPED]] == ["e5"]

    def test_category_grouping(self, catalog):
        """Test grouping by category ignores folder"""
        groups = catalog.group_by("category")

        assert [r.asset_id for r in groups["Interior"]] == ["b2", "c3"]
        assert [r.asset_id for r in groups["Exterior"]] == ["a1", "d4"]
        assert [r.asset_id for r in groups[UNGROUPED]] == ["e5"]

    def test_group_preserves_load_order(self):
        """Test records keep load order inside a group"""
        catalog = Catalog()
        catalog.load([make_record(i) for i in ("z", "y", "x")])

        assert [r.asset_id for r in catalog.group_by()["Deluxe Buses"]] == ["z", "y", "x"]

    def test_unknown_group_key(self, catalog):
        """Test an unknown group key raises ValueError"""
        with pytest.raises(ValueError):
            catalog.group_by("title")

    def test_group_ids(self, catalog):
        """Test group_ids resolves ids for one group"""
        assert catalog.group_ids("Deluxe Buses") == ["a1", "b2"]
        assert catalog.group_ids("Nope") == []


class TestFilter:
    """Tests for Catalog.filter and Catalog.apply"""

    def test_empty_query_matches_everything(self, catalog, records):
        """Test filter('') returns the full set unchanged"""
        assert catalog.filter("") == records

    def test_filter_is_idempotent(self, catalog):
        """Test filtering a filtered result with the same query changes nothing"""
        once = catalog.filter("int")
        twice = catalog.filter("int", once)

        assert twice == once

    def test_matches_title_case_insensitively(self, catalog):
        """Test title matching ignores case"""
        assert [r.asset_id for r in catalog.filter("DASH")] == ["b2"]

    def test_matches_any_tag(self, catalog):
        """Test each tag is searched"""
        assert [r.asset_id for r in catalog.filter("blue")] == ["c3"]
        assert [r.asset_id for r in catalog.filter("sleep")] == ["a1"]

    def test_matches_category(self, catalog):
        """Test category is searched"""
        assert [r.asset_id for r in catalog.filter("exterior")] == ["a1", "d4"]

    def test_query_whitespace_is_significant(self, catalog):
        """Test the query is matched as typed, spaces included"""
        assert catalog.filter("seats ") == []
        assert catalog.filter("   ") == []
        assert [r.asset_id for r in catalog.filter("t v")] == ["a1"]

    def test_record_without_category_is_searchable(self, catalog):
        """Test a record with no category still matches on title"""
        assert [r.asset_id for r in catalog.filter("misc")] == ["e5"]

    def test_apply_keeps_empty_groups(self, catalog):
        """Test groups with no matches stay listed with no records"""
        view = catalog.apply("folder", "dashboard")

        assert set(view) == set(catalog.group_by("folder"))
        assert [r.asset_id for r in view["Deluxe Buses"]] == ["b2"]
        assert view["Sleeper Bus(Spider)"] == []


class TestReconciliation:
    """Tests for load, upsert and remove"""

    def test_upsert_replaces_in_place(self, catalog):
        """Test upsert replaces an existing record without moving it"""
        catalog.upsert(make_record("b2", title="Cockpit"))

        assert [r.asset_id for r in catalog.records()] == ["a1", "b2", "c3", "d4", "e5"]
        assert catalog.get("b2").title == "Cockpit"

    def test_upsert_appends_new_record(self, catalog):
        """Test upsert of a new id appends it"""
        catalog.upsert(make_record("f6"))

        assert catalog.records()[-1].asset_id == "f6"
        assert len(catalog) == 6

    def test_remove_unknown_is_noop(self, catalog):
        """Test removing an unknown id is not an error"""
        assert catalog.remove("missing") is False
        assert len(catalog) == 5

    def test_remove_notifies_listeners(self, catalog):
        """Test removal listeners hear about removed ids"""
        removed = []
        catalog.add_removal_listener(removed.append)

        catalog.remove("a1")

        assert removed == ["a1"]
        assert "a1" not in catalog

    def test_load_replaces_everything(self, catalog):
        """Test load drops records missing from the new set"""
        removed = []
        catalog.add_removal_listener(removed.append)

        catalog.load([make_record("a1"), make_record("z9")])

        assert [r.asset_id for r in catalog.records()] == ["a1", "z9"]
        assert sorted(removed) == ["b2", "c3", "d4", "e5"]

    def test_load_keeps_first_of_duplicate_ids(self):
        """Test duplicate ids in a load keep the first record"""
        catalog = Catalog()
        catalog.load([make_record("a1", title="first"), make_record("a1", title="second")])

        assert len(catalog) == 1
        assert catalog.get("a1").title == "first"
