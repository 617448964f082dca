import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from models.asset import AssetRecord

logger = logging.getLogger("SanityClient")

ASSET_PROJECTION = "{_id, title, tags, category, folder, image}"
CDN_BASE_URL = "https://cdn.sanity.io/images"
# image-<hash>-<width>x<height>-<ext>
IMAGE_REF_PATTERN = re.compile(r"^image-(?P<hash>[A-Za-z0-9]+)-(?P<dims>\d+x\d+)-(?P<ext>[a-z0-9]+)$")


class StoreError(Exception):
    """Raised when the remote store rejects or fails a request"""


class SanityStoreClient:
    """Remote document store client for Sanity datasets.

    Records live as documents of `document_type`; image blobs are uploaded as
    Sanity image assets and referenced from the document's `image` field.
    """

    def __init__(
        self,
        project_id: str,
        dataset: str = "production",
        api_version: str = "2023-05-03",
        token: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        if not project_id:
            raise ValueError("A Sanity project_id is required (set SANITY_PROJECT_ID)")
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.base_url = f"https://{project_id}.api.sanity.io/v{self.api_version}"

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"Sanity API error: {e}") from e
        if response.status_code >= 400:
            raise StoreError(f"Sanity API returned {response.status_code}: {response.text[:300]}")
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Sanity API returned invalid JSON: {e}") from e

    def _mutate(self, mutations: List[Dict[str, Any]], return_ids: bool = False) -> Dict[str, Any]:
        params = {"returnIds": "true"} if return_ids else None
        return self._request(
            "POST",
            f"/data/mutate/{self.dataset}",
            params=params,
            json={"mutations": mutations},
            headers=self._headers("application/json"),
        )

    def fetch_all(self, type_filter: str = "imageAsset") -> List[AssetRecord]:
        """Fetch every document of `type_filter` as AssetRecords"""
        query = f'*[_type == "{type_filter}"]{ASSET_PROJECTION}'
        data = self._request(
            "GET",
            f"/data/query/{self.dataset}",
            params={"query": query},
            headers=self._headers(),
        )
        documents = data.get("result") if isinstance(data, dict) else None
        if not isinstance(documents, list):
            raise StoreError("Sanity query response has no result list")
        records = []
        for doc in documents:
            if not isinstance(doc, dict) or not doc.get("_id"):
                logger.warning("Skipping malformed document in query result")
                continue
            records.append(AssetRecord.from_document(doc))
        logger.info(f"Fetched {len(records)} '{type_filter}' documents")
        return records

    def create(self, record: AssetRecord, document_type: str = "imageAsset") -> str:
        """Create a document and return the id the store assigned"""
        data = self._mutate([{"create": record.to_document(document_type)}], return_ids=True)
        try:
            asset_id = data["results"][0]["id"]
        except (KeyError, IndexError, TypeError):
            raise StoreError(f"Create response carried no document id: {data}")
        logger.info(f"Created document {asset_id}")
        return asset_id

    def patch(self, asset_id: str, changes: Dict[str, Any]):
        """Set changed fields; fields changed to None are unset, not nulled"""
        patch: Dict[str, Any] = {"id": asset_id}
        to_set = {key: value for key, value in changes.items() if value is not None}
        to_unset = sorted(key for key, value in changes.items() if value is None)
        if to_set:
            patch["set"] = to_set
        if to_unset:
            patch["unset"] = to_unset
        self._mutate([{"patch": patch}])
        logger.info(f"Patched document {asset_id}: {sorted(changes)}")

    def delete(self, asset_id: str):
        self._mutate([{"delete": {"id": asset_id}}])
        logger.info(f"Deleted document {asset_id}")

    def upload_blob(self, data: bytes, mime_hint: str, filename: Optional[str] = None) -> str:
        """Upload image bytes and return the opaque image reference"""
        params = {"filename": filename} if filename else None
        response = self._request(
            "POST",
            f"/assets/images/{self.dataset}",
            params=params,
            data=data,
            headers=self._headers(mime_hint or "application/octet-stream"),
        )
        try:
            return response["document"]["_id"]
        except (KeyError, TypeError):
            raise StoreError(f"Upload response carried no asset id: {response}")

    def build_display_url(self, image_ref: str, width: int = 800) -> str:
        """Build the CDN URL for an image reference at a given width (no network)"""
        match = IMAGE_REF_PATTERN.match(image_ref or "")
        if not match:
            raise ValueError(f"Malformed image reference '{image_ref}'")
        filename = f"{match['hash']}-{match['dims']}.{match['ext']}"
        return (
            f"{CDN_BASE_URL}/{quote(self.project_id)}/{quote(self.dataset)}/{filename}"
            f"?w={int(width)}"
        )
