"""One operator's catalog session: gate, catalog, selection and operations"""

import asyncio
import logging
from typing import Iterable, Optional

from managers.bulk_pipeline import BulkOperationPipeline
from managers.catalog import Catalog
from managers.delivery import DirectoryDownloadSink, build_share_target
from managers.edit_session import EditSession
from managers.selection import SelectionSet
from managers.settings_manager import SettingsManager
from managers.upload_ingestor import UploadIngestor
from models.results import LoadReport
from store_client import SanityStoreClient

logger = logging.getLogger("MCP_Server")

# Changing any of these rebuilds the store client and the gate
CONNECTION_SETTINGS = frozenset({"project_id", "dataset", "api_version", "token", "request_timeout", "login_url"})


class AuthorizationError(Exception):
    """The operator is not allowed to act; send them to `login_url`"""

    def __init__(self, login_url: str, reason: str = "Not authorized"):
        super().__init__(f"{reason}. Sign in at {login_url}")
        self.login_url = login_url
        self.reason = reason


class SessionGate:
    """Boolean authorization gate.

    Authorized when the remote store is configured and an API token is set.
    """

    def __init__(self, token: Optional[str], login_url: str = "/login", configured: bool = True):
        self.token = token
        self.login_url = login_url
        self.configured = configured

    def is_authorized(self) -> bool:
        return self.configured and bool(self.token)

    @property
    def reason(self) -> str:
        if not self.configured:
            return "Remote store is not configured (set SANITY_PROJECT_ID)"
        return "Not authorized"

    def require(self):
        if not self.is_authorized():
            raise AuthorizationError(self.login_url, self.reason)


def build_store(settings: SettingsManager) -> Optional[SanityStoreClient]:
    """Store client for the configured project, or None when there is no project"""
    project_id = settings.get("project_id")
    if not project_id:
        logger.warning("No Sanity project configured; set SANITY_PROJECT_ID or the project_id setting")
        return None
    return SanityStoreClient(
        project_id=project_id,
        dataset=settings.get("dataset"),
        api_version=settings.get("api_version"),
        token=settings.get("token"),
        timeout=settings.get("request_timeout"),
    )


def build_gate(settings: SettingsManager, store: Optional[SanityStoreClient]) -> SessionGate:
    return SessionGate(settings.get("token"), settings.get("login_url"), configured=store is not None)


class CatalogSession:
    """Wires the catalog components around one remote store"""

    def __init__(self, store, gate: SessionGate, settings: SettingsManager, fetcher=None):
        self.store = store
        self.gate = gate
        self.settings = settings
        self.document_type = settings.get("document_type")
        self.catalog = Catalog()
        self.selection = SelectionSet(self.catalog)
        pipeline_kwargs = {"fetcher": fetcher} if fetcher else {}
        self.pipeline = BulkOperationPipeline(
            self.catalog,
            self.selection,
            store,
            download_sink=DirectoryDownloadSink(settings.get("download_dir")),
            share_target=build_share_target(settings.get("share_dir")),
            display_width=settings.get("display_width"),
            **pipeline_kwargs,
        )
        self.edit_session = EditSession(self.catalog, self.pipeline)
        self.ingestor = UploadIngestor(
            store,
            catalog=self.catalog,
            folders=settings.get("folders"),
            document_type=self.document_type,
        )

    @classmethod
    def from_settings(cls, settings: SettingsManager, fetcher=None) -> "CatalogSession":
        """Session for the configured store; unconfigured stores leave the gate closed"""
        store = build_store(settings)
        return cls(store, build_gate(settings, store), settings, fetcher=fetcher)

    def connect(self, store, gate: SessionGate):
        """Switch to another store. The catalog stays empty until the next load."""
        self.store = store
        self.gate = gate
        self.pipeline.store = store
        self.ingestor.store = store
        self.edit_session.cancel()
        self.catalog.load([])
        logger.info(f"Connected catalog session (authorized: {gate.is_authorized()})")

    def reconnect(self):
        store = build_store(self.settings)
        self.connect(store, build_gate(self.settings, store))

    def apply_settings(self, updated: Iterable[str] = ()):
        """Pick up settings changed at runtime.

        Connection settings rebuild the store client and the gate.
        """
        self.pipeline.download_sink = DirectoryDownloadSink(self.settings.get("download_dir"))
        self.pipeline.share_target = build_share_target(self.settings.get("share_dir"))
        self.pipeline.display_width = self.settings.get("display_width")
        self.ingestor.folders = list(self.settings.get("folders"))
        self.document_type = self.settings.get("document_type")
        self.ingestor.document_type = self.document_type
        if CONNECTION_SETTINGS.intersection(updated):
            self.reconnect()
        logger.info("Applied updated settings to catalog session")

    async def load(self) -> LoadReport:
        """Rebuild the catalog from the remote store.

        A failed fetch leaves an empty catalog and is reported, not raised.

        Raises:
            AuthorizationError: If the session gate is closed
        """
        self.gate.require()
        try:
            records = await asyncio.to_thread(self.store.fetch_all, self.document_type)
        except Exception as e:
            logger.error(f"Failed to load catalog: {e}")
            self.catalog.load([])
            return LoadReport(count=0, error=str(e))
        self.catalog.load(records)
        self.selection.prune()
        return LoadReport(count=len(self.catalog))

    def display_url(self, image_ref: Optional[str]) -> Optional[str]:
        if not image_ref or self.store is None:
            return None
        try:
            return self.store.build_display_url(image_ref, self.settings.get("display_width"))
        except ValueError:
            return None
