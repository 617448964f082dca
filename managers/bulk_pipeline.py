"""Bulk operations over the current selection"""

import asyncio
import logging
import zipfile
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Set, Tuple

from asset_processor import extension_for_ref, fetch_asset_bytes
from managers.catalog import Catalog
from managers.delivery import DirectoryDownloadSink, ShareRejected, ShareUnsupported, safe_filename
from managers.selection import SelectionSet
from models.asset import AssetRecord, clean_category, parse_tags
from models.results import BulkResult, EditOutcome, ShareResult

logger = logging.getLogger("MCP_Server")

ARCHIVE_NAME = "downloaded_images.zip"


def archive_entry_name(record: AssetRecord, used: Set[str]) -> str:
    """Deterministic file name for a record that collides with nothing in `used`.

    The title is used as-is when free; a shared title gets the asset id
    appended. `used` is updated with the returned name.
    """
    extension = extension_for_ref(record.image_ref)
    stem = safe_filename(record.title)
    candidates = [f"{stem}.{extension}", f"{stem}-{safe_filename(record.asset_id)}.{extension}"]
    name = next((c for c in candidates if c.lower() not in used), None)
    counter = 2
    while name is None:
        candidate = f"{stem}-{safe_filename(record.asset_id)}-{counter}.{extension}"
        if candidate.lower() not in used:
            name = candidate
        counter += 1
    used.add(name.lower())
    return name


def build_archive(entries: Sequence[Tuple[str, bytes]]) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return buffer.getvalue()


class BulkOperationPipeline:
    """Runs delete, export, download, share and edit against the remote store.

    Each bulk operation snapshots the selection once, processes items one at a
    time in selection order, and reconciles the catalog after each success.
    Per-item failures are collected, never raised.
    """

    def __init__(
        self,
        catalog: Catalog,
        selection: SelectionSet,
        store,
        download_sink: DirectoryDownloadSink,
        share_target,
        fetcher: Callable[[str], bytes] = fetch_asset_bytes,
        display_width: int = 800,
    ):
        self.catalog = catalog
        self.selection = selection
        self.store = store
        self.download_sink = download_sink
        self.share_target = share_target
        self.fetcher = fetcher
        self.display_width = display_width

    def resolve_selection(self) -> List[AssetRecord]:
        records = []
        for asset_id in self.selection.selected_ids():
            record = self.catalog.get(asset_id)
            if record is not None:
                records.append(record)
        return records

    async def _fetch_display_bytes(self, record: AssetRecord) -> bytes:
        if not record.image_ref:
            raise ValueError(f"Asset {record.asset_id} has no image")
        url = self.store.build_display_url(record.image_ref, self.display_width)
        return await asyncio.to_thread(self.fetcher, url)

    async def bulk_delete(self) -> BulkResult:
        return await self._delete(self.resolve_selection())

    async def delete_one(self, asset_id: str) -> BulkResult:
        """Delete a single asset regardless of the selection"""
        record = self.catalog.get(asset_id)
        return await self._delete([record] if record else [], clear_selection=False)

    async def _delete(self, records: List[AssetRecord], clear_selection: bool = True) -> BulkResult:
        result = BulkResult(operation="delete")
        if not records:
            result.nothing_selected = True
            return result
        for record in records:
            result.labels[record.asset_id] = record.label
            try:
                await asyncio.to_thread(self.store.delete, record.asset_id)
            except Exception as e:
                logger.warning(f"Delete failed for {record.asset_id}: {e}")
                result.failed[record.asset_id] = str(e)
                continue
            self.catalog.remove(record.asset_id)
            result.succeeded.append(record.asset_id)
        if clear_selection:
            self.selection.clear()
        logger.info(f"Bulk delete: {result.summary()}")
        return result

    async def _collect(self, records: List[AssetRecord], result: BulkResult) -> List[Tuple[str, bytes]]:
        entries = []
        used: Set[str] = set()
        for record in records:
            result.labels[record.asset_id] = record.label
            try:
                data = await self._fetch_display_bytes(record)
            except Exception as e:
                logger.warning(f"Fetch failed for {record.asset_id}: {e}")
                result.failed[record.asset_id] = str(e)
                continue
            entries.append((archive_entry_name(record, used), data))
            result.succeeded.append(record.asset_id)
        return entries

    async def export_archive(self, archive_name: str = ARCHIVE_NAME) -> BulkResult:
        """Bundle every fetchable selected asset into one zip download"""
        result = BulkResult(operation="export")
        records = self.resolve_selection()
        if not records:
            result.nothing_selected = True
            return result
        entries = await self._collect(records, result)
        self.selection.clear()
        if not entries:
            logger.warning("Archive export fetched no images; no archive written")
            return result
        content = await asyncio.to_thread(build_archive, entries)
        result.artifact = await asyncio.to_thread(self.download_sink.save, archive_name, content)
        logger.info(f"Archive export to {result.artifact}: {result.summary()}")
        return result

    async def download_raw(self) -> BulkResult:
        """Offer each selected asset as its own downloaded file"""
        result = BulkResult(operation="download")
        records = self.resolve_selection()
        if not records:
            result.nothing_selected = True
            return result
        used: Set[str] = set()
        for record in records:
            result.labels[record.asset_id] = record.label
            try:
                data = await self._fetch_display_bytes(record)
                path = await asyncio.to_thread(
                    self.download_sink.save, archive_entry_name(record, used), data
                )
            except Exception as e:
                logger.warning(f"Download failed for {record.asset_id}: {e}")
                result.failed[record.asset_id] = str(e)
                continue
            result.files.append(path)
            result.succeeded.append(record.asset_id)
        self.selection.clear()
        logger.info(f"Raw download: {result.summary()}")
        return result

    async def share(self) -> ShareResult:
        """Hand every selected asset to the share target as one batch"""
        records = self.resolve_selection()
        if not records:
            return ShareResult(ok=False, nothing_selected=True)
        if not self.share_target.is_supported():
            self.selection.clear()
            return ShareResult(ok=False, error="Sharing is not supported in this environment")
        try:
            files = []
            used: Set[str] = set()
            for record in records:
                data = await self._fetch_display_bytes(record)
                files.append((archive_entry_name(record, used), data))
            location = await asyncio.to_thread(self.share_target.share, files)
        except (ShareUnsupported, ShareRejected) as e:
            logger.warning(f"Share failed: {e}")
            return ShareResult(ok=False, error=str(e))
        except Exception as e:
            logger.warning(f"Share failed while collecting images: {e}")
            return ShareResult(ok=False, error=f"Could not collect images to share: {e}")
        finally:
            self.selection.clear()
        logger.info(f"Shared {len(files)} assets to {location}")
        return ShareResult(ok=True, shared_count=len(files), location=location)

    async def apply_edit(
        self,
        asset_id: str,
        title: str,
        tags_text: str,
        category: Optional[str],
    ) -> EditOutcome:
        """Patch one asset's metadata and replace the catalog record on success"""
        record = self.catalog.get(asset_id)
        if record is None:
            return EditOutcome(ok=False, error=f"Asset {asset_id} is not in the catalog")
        updated = record.with_metadata(title, parse_tags(tags_text), clean_category(category))
        changes = {"title": updated.title, "tags": updated.tags, "category": updated.category}
        try:
            await asyncio.to_thread(self.store.patch, asset_id, changes)
        except Exception as e:
            logger.warning(f"Edit failed for {asset_id}: {e}")
            return EditOutcome(ok=False, error=str(e))
        self.catalog.upsert(updated)
        return EditOutcome(ok=True, record=updated)
