"""
In-memory hosted store implementations

Process-local DocumentStore and BlobStore used for local development
(``STORE_BACKEND=memory``) and by the test suite. They honour the same
query ordering, absent-value and not-found semantics as the REST clients.
"""

import copy
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, unquote, urlparse

from PartsCatalogue.clients.base_store import BlobStore, DocumentStore, PushKeyGenerator, apply_query
from PartsCatalogue.clients.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _split(path: str) -> List[str]:
    return [segment for segment in path.strip("/").split("/") if segment]


class InMemoryDocumentStore(DocumentStore):
    """Document tree held in a nested dict."""

    def __init__(self, initial_data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = copy.deepcopy(initial_data) if initial_data else {}
        self.key_generator = PushKeyGenerator()

    def _node(self, path: str) -> Any:
        node: Any = self.data
        for segment in _split(path):
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    async def get(self,
                  path: str,
                  order_by: Optional[str] = None,
                  start_at: Optional[Any] = None,
                  limit_to_first: Optional[int] = None) -> Any:
        value = copy.deepcopy(self._node(path))
        if isinstance(value, dict) and (order_by or start_at is not None or limit_to_first is not None):
            value = apply_query(value, order_by=order_by, start_at=start_at, limit_to_first=limit_to_first)
        return value

    async def get_keys(self, path: str) -> List[str]:
        value = self._node(path)
        return list(value.keys()) if isinstance(value, dict) else []

    async def set(self, path: str, value: Any) -> None:
        segments = _split(path)
        if not segments:
            self.data = copy.deepcopy(value) if isinstance(value, dict) else {}
            return
        node = self.data
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        if value is None:
            node.pop(segments[-1], None)
        else:
            node[segments[-1]] = copy.deepcopy(value)

    async def delete(self, path: str) -> None:
        await self.set(path, None)

    def generate_key(self) -> str:
        return self.key_generator.generate()


class InMemoryBlobStore(BlobStore):
    """Objects held in a dict keyed by object path."""

    def __init__(self, bucket: str = "local-bucket"):
        self.bucket = bucket
        self.objects: Dict[str, Tuple[bytes, str, str]] = {}

    @property
    def public_base_url(self) -> str:
        return f"memory://{self.bucket}/o"

    def _key_from_url(self, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme != "memory" or parsed.netloc != self.bucket or not parsed.path.startswith("/o/"):
            raise NotFoundError(f"Not found: {url}", url=url)
        return unquote(parsed.path[len("/o/"):])

    def _download_url(self, key: str, token: str) -> str:
        return f"{self.public_base_url}/{quote(key, safe='')}?alt=media&token={token}"

    async def upload(self, key: str, data: bytes, content_type: str = "image/png") -> str:
        token = uuid.uuid4().hex
        self.objects[key] = (bytes(data), content_type, token)
        logger.debug(f"Stored {len(data)} bytes at {key}")
        return self._download_url(key, token)

    async def get_download_url(self, key: str) -> str:
        if key not in self.objects:
            raise NotFoundError(f"Not found: {key}")
        return self._download_url(key, self.objects[key][2])

    async def fetch_bytes(self, url: str) -> bytes:
        key = self._key_from_url(url)
        if key not in self.objects:
            raise NotFoundError(f"Not found: {url}", url=url)
        return self.objects[key][0]

    async def download(self, key: str) -> bytes:
        if key not in self.objects:
            raise NotFoundError(f"Not found: {key}")
        return self.objects[key][0]

    async def delete(self, key: str) -> None:
        if key not in self.objects:
            raise NotFoundError(f"Not found: {key}")
        del self.objects[key]
