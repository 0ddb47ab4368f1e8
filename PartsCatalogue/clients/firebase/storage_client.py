"""
Cloud Storage REST client

BlobStore implementation over the hosted storage REST API
(``https://firebasestorage.googleapis.com/v0/b/{bucket}/o``). The API has no
rename/copy primitive: only upload, metadata (download token) lookup,
media download and delete.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from PartsCatalogue.clients.base_store import BlobStore
from PartsCatalogue.clients.exceptions import InvalidResponseError
from PartsCatalogue.clients.rest_client import RESTClient

logger = logging.getLogger(__name__)

STORAGE_API_URL = "https://firebasestorage.googleapis.com/v0/b"


class StorageClient(BlobStore):
    """Blob store backed by the storage REST API."""

    def __init__(self,
                 bucket: str,
                 auth_token: Optional[str] = None,
                 timeout: float = 30,
                 api_url: str = STORAGE_API_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.bucket = bucket
        self._base_url = f"{api_url.rstrip('/')}/{bucket}/o"
        self.client = RESTClient(
            base_url=self._base_url,
            api_key=auth_token,
            auth_prefix="Firebase",
            timeout=timeout,
            transport=transport,
        )
        # Download URLs carry their own token; fetch them the way a browser would
        self.url_client = RESTClient(
            base_url=self._base_url,
            auth_header_name="",
            timeout=timeout,
            transport=transport,
        )
        self.client.validate_configuration()
        self.url_client.validate_configuration()
        self.logger = logging.getLogger(f"{__name__}.StorageClient")

    @property
    def public_base_url(self) -> str:
        return self._base_url

    @staticmethod
    def _object_endpoint(key: str) -> str:
        return quote(key, safe="")

    def _download_url(self, key: str, token: Optional[str]) -> str:
        url = f"{self._base_url}/{self._object_endpoint(key)}?alt=media"
        if token:
            url += f"&token={token}"
        return url

    @staticmethod
    def _first_token(metadata) -> Optional[str]:
        if not isinstance(metadata, dict):
            raise InvalidResponseError("Storage metadata response is not an object", expected_format="json")
        tokens = metadata.get("downloadTokens") or ""
        return tokens.split(",")[0] or None

    async def upload(self, key: str, data: bytes, content_type: str = "image/png") -> str:
        self.logger.info(f"Uploading {len(data)} bytes to {key}")
        response = await self.client.post(
            "",
            params={"uploadType": "media", "name": key},
            content=data,
            headers={"Content-Type": content_type},
        )
        return self._download_url(key, self._first_token(response.data))

    async def get_download_url(self, key: str) -> str:
        response = await self.client.get(self._object_endpoint(key))
        return self._download_url(key, self._first_token(response.data))

    async def fetch_bytes(self, url: str) -> bytes:
        response = await self.url_client.get(url)
        return response.raw_content or b""

    async def download(self, key: str) -> bytes:
        response = await self.client.get(self._object_endpoint(key), params={"alt": "media"})
        return response.raw_content or b""

    async def delete(self, key: str) -> None:
        self.logger.info(f"Deleting {key}")
        await self.client.delete(self._object_endpoint(key))
