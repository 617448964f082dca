"""Result models for bulk operations and uploads"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from models.asset import AssetRecord


@dataclass
class BulkResult:
    """Outcome of a per-item bulk operation.

    `succeeded` keeps the order items were processed in; `failed` maps
    asset_id to the error detail. `labels` maps every processed id to a
    human-readable title for reporting.
    """
    operation: str
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    nothing_selected: bool = False
    artifact: Optional[Path] = None
    files: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.nothing_selected and not self.failed

    def summary(self) -> str:
        if self.nothing_selected:
            return "No images selected"
        text = f"{len(self.succeeded)} succeeded, {len(self.failed)} failed"
        if self.failed:
            names = [self.labels.get(asset_id, asset_id) for asset_id in self.failed]
            text += ": " + ", ".join(names)
        return text

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "operation": self.operation,
            "succeeded": list(self.succeeded),
            "failed": dict(self.failed),
            "nothing_selected": self.nothing_selected,
            "message": self.summary(),
        }
        if self.artifact is not None:
            data["artifact"] = str(self.artifact)
        if self.files:
            data["files"] = [str(path) for path in self.files]
        return data


@dataclass
class ShareResult:
    """Whole-batch outcome of a share; never itemised"""
    ok: bool
    shared_count: int = 0
    error: Optional[str] = None
    nothing_selected: bool = False
    location: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.nothing_selected:
            return {"success": False, "nothing_selected": True, "message": "No images selected"}
        data: Dict[str, Any] = {"success": self.ok, "shared_count": self.shared_count}
        if self.error:
            data["error"] = self.error
        if self.location:
            data["location"] = self.location
        return data


@dataclass
class EditOutcome:
    ok: bool
    record: Optional[AssetRecord] = None
    error: Optional[str] = None


@dataclass
class UploadReport:
    """Outcome of an upload batch.

    Failures are (file name, error detail) pairs; names may repeat across
    archives so they are not used as keys.
    """
    folder: str
    total: int = 0
    created: List[AssetRecord] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        return len(self.created)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    def summary(self) -> str:
        text = f"Uploaded {self.uploaded_count} images to '{self.folder}'"
        if self.failed:
            text += f"; {self.failure_count} failed: " + ", ".join(name for name, _ in self.failed)
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder": self.folder,
            "total": self.total,
            "uploaded_count": self.uploaded_count,
            "failure_count": self.failure_count,
            "created": [record.asset_id for record in self.created],
            "failed": [{"name": name, "error": error} for name, error in self.failed],
            "message": self.summary(),
        }


@dataclass
class LoadReport:
    count: int
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.error is None, "count": self.count}
        if self.error:
            data["error"] = self.error
        return data
