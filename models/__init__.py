"""Data models for the image catalog server"""

from models.asset import AssetRecord, clean_category, format_tags, parse_tags
from models.results import BulkResult, EditOutcome, LoadReport, ShareResult, UploadReport

__all__ = [
    "AssetRecord",
    "BulkResult",
    "EditOutcome",
    "LoadReport",
    "ShareResult",
    "UploadReport",
    "clean_category",
    "format_tags",
    "parse_tags",
]
