"""Image utilities for fetching display binaries and sniffing uploads"""

import logging
import mimetypes
import os
from io import BytesIO
from typing import Any, Dict, Optional

import requests
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger("AssetProcessor")

PIL_FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}
EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def fetch_asset_bytes(asset_url: str, timeout: int = 30) -> bytes:
    """Fetch asset bytes from the image CDN"""
    try:
        response = requests.get(asset_url, timeout=timeout)
        response.raise_for_status()
        return response.content
    except requests.RequestException as e:
        logger.error(f"Failed to fetch asset from {asset_url}: {e}")
        raise


def get_image_metadata(image_bytes: bytes) -> Dict[str, Any]:
    """Extract width, height, format from image bytes"""
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            return {
                "width": img.width,
                "height": img.height,
                "format": img.format
            }
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Failed to extract image metadata: {e}")
        return {"width": None, "height": None, "format": None}


def detect_mime_type(image_bytes: bytes, filename: Optional[str] = None) -> str:
    """Best MIME type for an upload: decoded format, then file extension"""
    image_format = get_image_metadata(image_bytes)["format"]
    if image_format in PIL_FORMAT_MIME_TYPES:
        return PIL_FORMAT_MIME_TYPES[image_format]
    if filename:
        extension = os.path.splitext(filename)[1].lstrip(".").lower()
        if extension in EXTENSION_MIME_TYPES:
            return EXTENSION_MIME_TYPES[extension]
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_MIME_TYPE


def extension_for_ref(image_ref: Optional[str], default: str = "jpg") -> str:
    """File extension carried by an image reference (image-<hash>-<dims>-<ext>)"""
    if not image_ref or "-" not in image_ref:
        return default
    extension = image_ref.rsplit("-", 1)[1].lower()
    return extension if extension.isalnum() else default
