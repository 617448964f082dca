"""Selection of assets targeted by the next bulk operation"""

import logging
from typing import Dict, Iterable, List

from managers.catalog import Catalog

logger = logging.getLogger("MCP_Server")


class SelectionSet:
    """Tracks chosen asset ids in insertion order.

    Only ids currently in the catalog can be selected, and ids leave the
    selection as soon as they leave the catalog.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        # dict keys give O(1) membership with stable insertion order
        self._ids: Dict[str, None] = {}
        catalog.add_removal_listener(self.discard)

    def toggle(self, asset_id: str) -> bool:
        """Flip membership and return the new state"""
        if asset_id in self._ids:
            del self._ids[asset_id]
            return False
        if asset_id not in self.catalog:
            raise KeyError(f"Asset {asset_id} is not in the catalog")
        self._ids[asset_id] = None
        return True

    def select_all_in(self, group_ids: Iterable[str]) -> bool:
        """Toggle a whole group.

        If every id in the group is already selected they are all deselected,
        otherwise the group is added to the selection. Returns True when the
        group ends up selected.
        """
        ids = [asset_id for asset_id in group_ids if asset_id in self.catalog]
        if not ids:
            return False
        if all(asset_id in self._ids for asset_id in ids):
            for asset_id in ids:
                self._ids.pop(asset_id, None)
            return False
        for asset_id in ids:
            self._ids.setdefault(asset_id, None)
        return True

    def discard(self, asset_id: str):
        self._ids.pop(asset_id, None)

    def prune(self):
        """Drop ids the catalog no longer holds"""
        for asset_id in [i for i in self._ids if i not in self.catalog]:
            del self._ids[asset_id]

    def clear(self):
        self._ids.clear()

    def is_selected(self, asset_id: str) -> bool:
        return asset_id in self._ids

    def selected_ids(self) -> List[str]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._ids)
