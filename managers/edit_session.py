"""Single-asset metadata edit session"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from managers.bulk_pipeline import BulkOperationPipeline
from managers.catalog import Catalog
from models.asset import format_tags
from models.results import EditOutcome

logger = logging.getLogger("MCP_Server")


class EditState(Enum):
    IDLE = "idle"
    EDITING = "editing"


@dataclass(frozen=True)
class EditDraft:
    title: str
    tags: str  # comma-delimited, as the operator types it
    category: str


class EditSession:
    """Idle -> Editing(asset, draft) -> Idle on save or cancel.

    A failed save keeps the session open with its draft untouched so the
    operator can retry without re-entering values.
    """

    def __init__(self, catalog: Catalog, pipeline: BulkOperationPipeline):
        self.catalog = catalog
        self.pipeline = pipeline
        self.asset_id: Optional[str] = None
        self.draft: Optional[EditDraft] = None
        self.last_error: Optional[str] = None

    @property
    def state(self) -> EditState:
        return EditState.EDITING if self.asset_id is not None else EditState.IDLE

    def begin(self, asset_id: str) -> EditDraft:
        record = self.catalog.get(asset_id)
        if record is None:
            raise KeyError(f"Asset {asset_id} is not in the catalog")
        self.asset_id = asset_id
        self.draft = EditDraft(
            title=record.title,
            tags=format_tags(record.tags),
            category=record.category or "",
        )
        self.last_error = None
        return self.draft

    def update(
        self,
        title: Optional[str] = None,
        tags: Optional[str] = None,
        category: Optional[str] = None,
    ) -> EditDraft:
        self._require_editing()
        changes = {
            key: value
            for key, value in (("title", title), ("tags", tags), ("category", category))
            if value is not None
        }
        self.draft = replace(self.draft, **changes)
        return self.draft

    async def save(self) -> EditOutcome:
        self._require_editing()
        outcome = await self.pipeline.apply_edit(
            self.asset_id, self.draft.title, self.draft.tags, self.draft.category
        )
        if outcome.ok:
            logger.info(f"Saved metadata for {self.asset_id}")
            self._close()
        else:
            self.last_error = outcome.error
        return outcome

    def cancel(self):
        self._close()

    def _close(self):
        self.asset_id = None
        self.draft = None
        self.last_error = None

    def _require_editing(self):
        if self.state is not EditState.EDITING:
            raise RuntimeError("No edit in progress; call begin() first")
