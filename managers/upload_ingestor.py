"""Upload ingestion: archive expansion, blob upload and record creation"""

import asyncio
import logging
import posixpath
import zipfile
import zlib
from dataclasses import dataclass, field, replace
from io import BytesIO
from pathlib import Path
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from asset_processor import detect_mime_type
from managers.catalog import Catalog
from models.asset import AssetRecord, clean_category, parse_tags
from models.results import UploadReport

logger = logging.getLogger("MCP_Server")

DEFAULT_FOLDERS = (
    "Luxury Bus (Victor)",
    "Luxury Bus (Kasper)",
    "Luxury Bus (Tourista)",
    "Luxury Bus (Hymer)",
    "Luxury Bus (Spider-Seater)",
    "Luxury Bus (Arrow)",
    "Sleeper Bus(Spider)",
    "Deluxe Buses",
    "Institutional Buses",
    "Special Purpose Buses",
)
ARCHIVE_EXTENSIONS = (".zip",)
# What zipfile raises while opening or reading a damaged archive
ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    RuntimeError,
    NotImplementedError,
    EOFError,
    OSError,
)


@dataclass(frozen=True)
class ImageExtensionPolicy:
    """Decides which archive entries count as images"""
    extensions: FrozenSet[str] = frozenset({"jpg", "jpeg", "png", "webp", "gif"})
    ignored_prefixes: Tuple[str, ...] = ("__MACOSX/",)

    def matches(self, name: str) -> bool:
        if any(name.startswith(prefix) for prefix in self.ignored_prefixes):
            return False
        _, dot, extension = name.rpartition(".")
        return bool(dot) and extension.lower() in self.extensions


@dataclass
class UploadFile:
    name: str
    data: bytes = field(repr=False)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "UploadFile":
        path = Path(path).expanduser()
        return cls(name=path.name, data=path.read_bytes())

    @property
    def is_archive(self) -> bool:
        return self.name.lower().endswith(ARCHIVE_EXTENSIONS)


class UploadIngestor:
    """Expands archives, uploads each image and creates its record.

    Images are uploaded one at a time in input order. A failing image is
    recorded and the batch carries on.
    """

    def __init__(
        self,
        store,
        catalog: Optional[Catalog] = None,
        folders: Sequence[str] = DEFAULT_FOLDERS,
        policy: ImageExtensionPolicy = ImageExtensionPolicy(),
        document_type: str = "imageAsset",
    ):
        self.store = store
        self.catalog = catalog
        self.folders = list(folders)
        self.policy = policy
        self.document_type = document_type

    def expand(self, files: Sequence[UploadFile]) -> Tuple[List[UploadFile], List[Tuple[str, str]]]:
        """Flatten inputs into image files.

        Unreadable archives and unreadable archive entries become failures;
        readable entries of a damaged archive are still uploaded.
        """
        images: List[UploadFile] = []
        failures: List[Tuple[str, str]] = []
        for upload in files:
            if not upload.is_archive:
                images.append(upload)
                continue
            try:
                images.extend(self._extract(upload, failures))
            except ARCHIVE_ERRORS as e:
                logger.warning(f"Could not read archive {upload.name}: {e}")
                failures.append((upload.name, f"Unreadable archive: {e}"))
        return images, failures

    def _extract(self, archive_file: UploadFile, failures: List[Tuple[str, str]]) -> List[UploadFile]:
        extracted = []
        with zipfile.ZipFile(BytesIO(archive_file.data)) as archive:
            for info in archive.infolist():
                if info.is_dir() or not self.policy.matches(info.filename):
                    continue
                try:
                    data = archive.read(info)
                except ARCHIVE_ERRORS as e:
                    logger.warning(f"Could not read {info.filename} from {archive_file.name}: {e}")
                    failures.append((info.filename, f"Unreadable archive entry: {e}"))
                    continue
                extracted.append(UploadFile(name=posixpath.basename(info.filename), data=data))
        logger.info(f"Extracted {len(extracted)} images from {archive_file.name}")
        return extracted

    async def ingest(
        self,
        files: Sequence[UploadFile],
        title: str,
        tags: str,
        category: str,
        folder: str,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> UploadReport:
        """Upload a batch with the same metadata applied to every image.

        Raises:
            ValueError: If `folder` is not one of the known folders
        """
        if folder not in self.folders:
            raise ValueError(f"Unknown folder '{folder}'. Choose one of: {', '.join(self.folders)}")

        images, failures = await asyncio.to_thread(self.expand, files)
        report = UploadReport(folder=folder, total=len(images), failed=failures)
        template = AssetRecord(
            asset_id="",
            title=title,
            image_ref=None,
            tags=parse_tags(tags),
            category=clean_category(category),
            folder=folder,
        )

        for image in images:
            try:
                record = await self._upload_one(image, template)
            except Exception as e:
                logger.warning(f"Upload failed for {image.name}: {e}")
                report.failed.append((image.name, str(e)))
                continue
            if self.catalog is not None:
                self.catalog.upsert(record)
            report.created.append(record)
            if on_progress:
                on_progress(report.uploaded_count / report.total)

        logger.info(report.summary())
        return report

    async def _upload_one(self, image: UploadFile, template: AssetRecord) -> AssetRecord:
        mime_type = detect_mime_type(image.data, image.name)
        image_ref = await asyncio.to_thread(self.store.upload_blob, image.data, mime_type, image.name)
        record = replace(template, image_ref=image_ref, tags=list(template.tags))
        asset_id = await asyncio.to_thread(self.store.create, record, self.document_type)
        return replace(record, asset_id=asset_id)
