"""Local delivery targets: download directory and share capability"""

import json
import logging
import re
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger("MCP_Server")

UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')
MAX_FILENAME_STEM = 120


class ShareUnsupported(Exception):
    """The local environment cannot share files"""


class ShareRejected(Exception):
    """The share was refused or cancelled"""


def safe_filename(name: str, default: str = "untitled") -> str:
    """Reduce a title to a single path component"""
    cleaned = UNSAFE_FILENAME_CHARS.sub("_", name or "").strip(" .")
    return cleaned[:MAX_FILENAME_STEM] or default


def canonicalize_path(path: Union[str, Path], must_exist: bool = True) -> Path:
    """Resolve path to absolute real path (handles symlinks).

    Raises:
        ValueError: If path cannot be resolved and must_exist=True
    """
    try:
        return Path(path).expanduser().resolve(strict=must_exist)
    except (OSError, RuntimeError) as e:
        raise ValueError(f"Cannot resolve path {path}: {e}")


def is_within(child_path: Union[str, Path], parent_path: Union[str, Path]) -> bool:
    """Check child_path is inside parent_path after resolving symlinks"""
    try:
        child_real = canonicalize_path(child_path, must_exist=False)
        parent_real = canonicalize_path(parent_path, must_exist=True)
    except ValueError:
        return False
    return child_real.is_relative_to(parent_real)


def _split_name(filename: str) -> Tuple[str, str]:
    path = Path(filename)
    return path.stem, path.suffix


class DirectoryDownloadSink:
    """Saves downloadable files into a local directory without overwriting"""

    def __init__(self, download_dir: Union[str, Path]):
        self.download_dir = Path(download_dir).expanduser()

    def save(self, filename: str, data: bytes) -> Path:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        stem, suffix = _split_name(safe_filename(filename))
        target = self.download_dir / f"{stem}{suffix}"
        counter = 1
        while target.exists():
            target = self.download_dir / f"{stem} ({counter}){suffix}"
            counter += 1
        if not is_within(target, self.download_dir):
            raise ValueError(f"Refusing to write outside {self.download_dir}: {filename}")
        target.write_bytes(data)
        logger.info(f"Saved download {target} ({len(data)} bytes)")
        return target


class UnsupportedShareTarget:
    """Share capability of an environment that cannot share"""

    def is_supported(self) -> bool:
        return False

    def share(self, files: Sequence[Tuple[str, bytes]]) -> str:
        raise ShareUnsupported("Sharing is not supported in this environment")


class DirectoryShareTarget:
    """Shares a batch by publishing it into a shared directory.

    Each batch lands in its own sub-directory of `share_root` and is recorded
    in `share_root/manifest.json`.
    """

    def __init__(self, share_root: Union[str, Path]):
        self.share_root = Path(share_root).expanduser()
        self._manifest_lock = threading.Lock()

    @property
    def manifest_path(self) -> Path:
        return self.share_root / "manifest.json"

    def is_supported(self) -> bool:
        return self.share_root.is_dir()

    def share(self, files: Sequence[Tuple[str, bytes]]) -> str:
        """Publish the whole batch and return its location"""
        if not self.is_supported():
            raise ShareUnsupported(f"Share directory {self.share_root} does not exist")
        batch_id = f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"
        batch_dir = self.share_root / batch_id
        try:
            batch_dir.mkdir()
            sink = DirectoryDownloadSink(batch_dir)
            written = [sink.save(name, data).name for name, data in files]
            self._record(batch_id, written)
        except OSError as e:
            raise ShareRejected(f"Share to {self.share_root} failed: {e}") from e
        logger.info(f"Shared {len(written)} files to {batch_dir}")
        return str(batch_dir)

    def load_manifest(self) -> Dict[str, Any]:
        if not self.manifest_path.exists():
            return {}
        try:
            with open(self.manifest_path, "r", encoding="utf-8") as f:
                manifest = json.load(f)
                return manifest if isinstance(manifest, dict) else {}
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load share manifest {self.manifest_path}: {e}")
            return {}

    def _record(self, batch_id: str, filenames: List[str]):
        with self._manifest_lock:
            manifest = self.load_manifest()
            manifest[batch_id] = {
                "files": filenames,
                "shared_at": datetime.now().isoformat(),
            }
            with open(self.manifest_path, "w", encoding="utf-8") as f:
                json.dump(manifest, f, indent=2)


def build_share_target(share_dir: Optional[str]):
    if share_dir:
        return DirectoryShareTarget(share_dir)
    return UnsupportedShareTarget()
