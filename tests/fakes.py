"""In-memory doubles for the remote store and blob fetcher"""

import zipfile
from io import BytesIO

from PIL import Image

from models.asset import AssetRecord
from store_client import StoreError


class FakeStore:
    """Remote store double that records calls and fails on demand"""

    def __init__(self, records=None):
        self.documents = {record.asset_id: record for record in records or []}
        self.calls = []
        self.fail_fetch = False
        self.fail_delete = set()
        self.fail_patch = set()
        self.fail_create_calls = set()  # 1-based create call numbers
        self.fail_upload_names = set()
        self._create_count = 0

    def fetch_all(self, type_filter="imageAsset"):
        self.calls.append(("fetch_all", type_filter))
        if self.fail_fetch:
            raise StoreError("Sanity API returned 503: unavailable")
        return list(self.documents.values())

    def create(self, record, document_type="imageAsset"):
        self._create_count += 1
        self.calls.append(("create", record.title))
        if self._create_count in self.fail_create_calls:
            raise StoreError("Sanity API returned 500: create failed")
        asset_id = f"created-{self._create_count}"
        self.documents[asset_id] = record
        return asset_id

    def patch(self, asset_id, changes):
        self.calls.append(("patch", asset_id, changes))
        if asset_id in self.fail_patch:
            raise StoreError("Sanity API returned 409: conflict")

    def delete(self, asset_id):
        self.calls.append(("delete", asset_id))
        if asset_id in self.fail_delete:
            raise StoreError("Sanity API returned 403: forbidden")
        self.documents.pop(asset_id, None)

    def upload_blob(self, data, mime_hint, filename=None):
        self.calls.append(("upload_blob", filename, mime_hint))
        if filename in self.fail_upload_names:
            raise StoreError("Sanity API returned 413: too large")
        return f"image-{len(self.calls):04d}abc-10x10-png"

    def build_display_url(self, image_ref, width=800):
        return f"https://cdn.example.test/{image_ref}?w={width}"

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


class FakeFetcher:
    """Blob fetcher double keyed by display URL"""

    def __init__(self, failing_refs=()):
        self.failing_refs = set(failing_refs)
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        ref = url.split("/")[-1].split("?")[0]
        if ref in self.failing_refs:
            raise ConnectionError(f"Could not fetch {ref}")
        return f"bytes:{ref}".encode()


def make_record(asset_id, title="photo", tags=None, category="Exterior", folder="Deluxe Buses"):
    return AssetRecord(
        asset_id=asset_id,
        title=title,
        image_ref=f"image-{asset_id}hash-800x600-jpg",
        tags=list(tags or []),
        category=category,
        folder=folder,
    )


def png_bytes(color=(255, 0, 0)):
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


def zip_bytes(entries):
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return buffer.getvalue()




def zip_with_corrupt_entry(entries, corrupt_name):
    """Deflated archive whose `corrupt_name` entry has an undecodable stream"""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            archive.writestr(name, data)
        archive.writestr(corrupt_name, png_bytes() * 4)
    raw = bytearray(buffer.getvalue())
    with zipfile.ZipFile(BytesIO(bytes(raw))) as archive:
        info = archive.getinfo(corrupt_name)
    offset = info.header_offset
    name_length = int.from_bytes(raw[offset + 26:offset + 28], "little")
    extra_length = int.from_bytes(raw[offset + 28:offset + 30], "little")
    start = offset + 30 + name_length + extra_length
    # 0xff opens a deflate block of reserved type
    raw[start:start + info.compress_size] = b"\xff" * info.compress_size
    return bytes(raw)


class ToolRecorder:
    """Stands in for FastMCP, keeping registered tool functions by name"""

    def __init__(self):
        self.tools = {}

    def tool(self):
        def decorator(func):
            self.tools[func.__name__] = func
            return func
        return decorator
