"""Manager classes for the image catalog server"""

from managers.bulk_pipeline import BulkOperationPipeline
from managers.catalog import Catalog
from managers.edit_session import EditSession
from managers.selection import SelectionSet
from managers.session import CatalogSession, SessionGate
from managers.settings_manager import SettingsManager
from managers.upload_ingestor import ImageExtensionPolicy, UploadIngestor

__all__ = [
    "BulkOperationPipeline",
    "Catalog",
    "CatalogSession",
    "EditSession",
    "ImageExtensionPolicy",
    "SelectionSet",
    "SessionGate",
    "SettingsManager",
    "UploadIngestor",
]
