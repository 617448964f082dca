"""Asset data models"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


def parse_tags(raw: Optional[str]) -> List[str]:
    """Split a comma-delimited tag string into an ordered tag list.

    Each token is trimmed and empty tokens are dropped, so
    " red, blue ,,green" becomes ["red", "blue", "green"].
    """
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def format_tags(tags: List[str]) -> str:
    """Join tags back into the editable comma form"""
    return ", ".join(tags)


def clean_category(raw: Optional[str]) -> Optional[str]:
    """Trimmed category, or None when nothing is left"""
    return (raw or "").strip() or None


@dataclass
class AssetRecord:
    """One image asset and its catalog metadata"""
    asset_id: str
    title: str
    image_ref: Optional[str]  # Remote blob reference, never touched by edits
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    folder: Optional[str] = None

    def __post_init__(self):
        # Search scans tags unconditionally
        if self.tags is None:
            self.tags = []
        if self.title is None:
            self.title = ""

    @property
    def label(self) -> str:
        return self.title or self.asset_id

    def with_metadata(self, title: str, tags: List[str], category: Optional[str]) -> "AssetRecord":
        """Return a full replacement record carrying new editable metadata"""
        return replace(self, title=title, tags=list(tags), category=category)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "AssetRecord":
        """Build a record from a remote store document"""
        image = doc.get("image")
        asset = (image.get("asset") or {}) if isinstance(image, dict) else {}
        tags = doc.get("tags") or []
        return cls(
            asset_id=doc["_id"],
            title=doc.get("title") or "",
            image_ref=asset.get("_ref"),
            tags=[str(tag) for tag in tags],
            category=doc.get("category") or None,
            folder=doc.get("folder") or None,
        )

    def to_document(self, document_type: str = "imageAsset") -> Dict[str, Any]:
        """Build the document body used to create this record remotely"""
        doc: Dict[str, Any] = {
            "_type": document_type,
            "title": self.title,
            "tags": list(self.tags),
        }
        if self.category is not None:
            doc["category"] = self.category
        if self.folder is not None:
            doc["folder"] = self.folder
        if self.image_ref:
            doc["image"] = {
                "_type": "image",
                "asset": {"_type": "reference", "_ref": self.image_ref},
            }
        return doc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "title": self.title,
            "tags": list(self.tags),
            "category": self.category,
            "folder": self.folder,
            "image_ref": self.image_ref,
        }
