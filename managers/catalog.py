"""Catalog of image assets for the current session"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from models.asset import AssetRecord

logger = logging.getLogger("MCP_Server")

UNGROUPED = "Ungrouped"
GROUP_KEYS = ("folder", "category")


class Catalog:
    """Owns the in-memory set of AssetRecords.

    Records keep the order they were loaded (or appended) in. The catalog is a
    cache of the remote store; it is rebuilt by `load` and kept consistent by
    `upsert`/`remove` after remote mutations succeed.
    """

    def __init__(self):
        self._assets: Dict[str, AssetRecord] = {}
        self._removal_listeners: List[Callable[[str], None]] = []

    def add_removal_listener(self, listener: Callable[[str], None]):
        """Call `listener(asset_id)` whenever a record leaves the catalog"""
        self._removal_listeners.append(listener)

    def load(self, records: Iterable[AssetRecord]):
        """Replace the entire set of records"""
        previous = set(self._assets)
        self._assets = {}
        for record in records:
            if record.asset_id in self._assets:
                logger.warning(f"Duplicate asset id {record.asset_id} in load; keeping the first")
                continue
            self._assets[record.asset_id] = record
        for asset_id in previous - set(self._assets):
            self._notify_removed(asset_id)
        logger.info(f"Loaded {len(self._assets)} assets into catalog")

    def upsert(self, record: AssetRecord):
        """Replace a record in place, or append it if it is new"""
        self._assets[record.asset_id] = record

    def remove(self, asset_id: str) -> bool:
        """Remove a record; unknown ids are ignored"""
        if self._assets.pop(asset_id, None) is None:
            return False
        self._notify_removed(asset_id)
        logger.debug(f"Removed asset {asset_id} from catalog")
        return True

    def get(self, asset_id: str) -> Optional[AssetRecord]:
        return self._assets.get(asset_id)

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def __len__(self) -> int:
        return len(self._assets)

    def records(self) -> List[AssetRecord]:
        return list(self._assets.values())

    def group_key_for(self, record: AssetRecord, key: str = "folder") -> str:
        """Group a record belongs to; folder falls back to category"""
        if key == "folder":
            return record.folder or record.category or UNGROUPED
        if key == "category":
            return record.category or UNGROUPED
        raise ValueError(f"Unknown group key '{key}'. Use one of: {', '.join(GROUP_KEYS)}")

    def group_by(self, key: str = "folder") -> Dict[str, List[AssetRecord]]:
        """Partition every record into exactly one group, preserving load order"""
        groups: Dict[str, List[AssetRecord]] = {}
        for record in self._assets.values():
            groups.setdefault(self.group_key_for(record, key), []).append(record)
        return groups

    def group_ids(self, group: str, key: str = "folder") -> List[str]:
        return [
            record.asset_id for record in self._assets.values()
            if self.group_key_for(record, key) == group
        ]

    def filter(self, query: str, records: Optional[Iterable[AssetRecord]] = None) -> List[AssetRecord]:
        """Case-insensitive substring match on title, tags and category.

        Filters the whole catalog unless `records` is given. An empty query
        matches everything.
        """
        source = self._assets.values() if records is None else records
        needle = (query or "").lower()
        if not needle:
            return list(source)
        return [record for record in source if _matches(record, needle)]

    def apply(self, key: str = "folder", query: str = "") -> Dict[str, List[AssetRecord]]:
        """Group, then filter within each group.

        Groups with no matches stay in the mapping with an empty list.
        """
        return {
            group: self.filter(query, records)
            for group, records in self.group_by(key).items()
        }

    def _notify_removed(self, asset_id: str):
        for listener in self._removal_listeners:
            listener(asset_id)


def _matches(record: AssetRecord, needle: str) -> bool:
    if needle in record.title.lower():
        return True
    if any(needle in tag.lower() for tag in record.tags):
        return True
    return bool(record.category) and needle in record.category.lower()
