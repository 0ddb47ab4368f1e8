"""
Hosted store interfaces

Abstract contracts for the two hosted services the catalogue persists to:
a realtime key/tree document store and an object (blob) store. Concrete
implementations live in clients/firebase (REST) and clients/memory_store.py.

The ordering helpers reproduce the realtime database's query ordering so that
every implementation returns the same rows for the same query.
"""

import random
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

KEY_ORDER = "$key"

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"

_INT_KEY_MIN = -(2 ** 31)
_INT_KEY_MAX = 2 ** 31 - 1


class PushKeyGenerator:
    """
    Generates 20-character, time-ordered unique keys in the realtime database
    push-id format: 8 chars of millisecond timestamp followed by 12 random
    chars. Keys generated within the same millisecond increment the random
    suffix so they still sort in creation order.
    """

    def __init__(self):
        self._last_push_time = 0
        self._last_rand_chars: List[int] = [0] * 12

    def generate(self, now_ms: Optional[int] = None) -> str:
        now = now_ms if now_ms is not None else int(time.time() * 1000)
        duplicate_time = now == self._last_push_time
        self._last_push_time = now

        time_chars = []
        for _ in range(8):
            time_chars.append(PUSH_CHARS[now % 64])
            now //= 64
        key = "".join(reversed(time_chars))

        if not duplicate_time:
            self._last_rand_chars = [random.randrange(64) for _ in range(12)]
        else:
            i = 11
            while i >= 0 and self._last_rand_chars[i] == 63:
                self._last_rand_chars[i] = 0
                i -= 1
            if i >= 0:
                self._last_rand_chars[i] += 1

        return key + "".join(PUSH_CHARS[c] for c in self._last_rand_chars)


def _key_sort_value(key: str) -> Tuple:
    # Keys that parse as 32-bit integers sort first, numerically
    try:
        number = int(key)
    except (TypeError, ValueError):
        number = None
    if number is not None and str(number) == key and _INT_KEY_MIN <= number <= _INT_KEY_MAX:
        return (0, number, "")
    return (1, 0, key)


def _child_sort_value(value: Any) -> Tuple:
    # null < false < true < numbers < strings < objects
    if value is None:
        return (0, 0, "")
    if isinstance(value, bool):
        return (1, int(value), "")
    if isinstance(value, (int, float)):
        return (2, value, "")
    if isinstance(value, str):
        return (3, 0, value)
    return (4, 0, "")


def sort_value(key: str, record: Any, order_by: str) -> Tuple:
    """Sort value of one child for the given ordering, ties broken by key."""
    if order_by == KEY_ORDER:
        return _key_sort_value(key)
    child = record.get(order_by) if isinstance(record, dict) else None
    return _child_sort_value(child) + _key_sort_value(key)


def order_snapshot(data: Dict[str, Any], order_by: str) -> Dict[str, Any]:
    """Return a new mapping with the children of ``data`` in query order."""
    ordered_keys = sorted(data.keys(), key=lambda k: sort_value(k, data[k], order_by))
    return {k: data[k] for k in ordered_keys}


def apply_query(data: Dict[str, Any],
                order_by: Optional[str] = None,
                start_at: Optional[Any] = None,
                limit_to_first: Optional[int] = None) -> Dict[str, Any]:
    """
    Apply an ordered range query to a snapshot.

    ``start_at`` is inclusive, matching the hosted query API.
    """
    if order_by is None:
        if start_at is not None or limit_to_first is not None:
            order_by = KEY_ORDER
        else:
            return dict(data)

    ordered = order_snapshot(data, order_by)

    if start_at is not None:
        if order_by == KEY_ORDER:
            floor = _key_sort_value(str(start_at))
            ordered = {k: v for k, v in ordered.items() if _key_sort_value(k) >= floor}
        else:
            floor = _child_sort_value(start_at)
            ordered = {
                k: v for k, v in ordered.items()
                if _child_sort_value(v.get(order_by) if isinstance(v, dict) else None) >= floor
            }

    if limit_to_first is not None:
        ordered = dict(list(ordered.items())[:limit_to_first])

    return ordered


def blob_key_for(identifier: str, prefix: str = "", extension: str = ".png") -> str:
    """
    Object key for an image belonging to ``identifier``.

    Every caller goes through this function so applications, approved parts
    and the PDF fallback chain all address the same object.
    """
    prefix = prefix.strip("/")
    name = f"{identifier}{extension}"
    return f"{prefix}/{name}" if prefix else name


class DocumentStore(ABC):
    """Hosted hierarchical key/value document database."""

    @abstractmethod
    async def get(self,
                  path: str,
                  order_by: Optional[str] = None,
                  start_at: Optional[Any] = None,
                  limit_to_first: Optional[int] = None) -> Any:
        """
        Read the value at ``path``.

        Returns None when nothing is stored there. When a query is given the
        returned mapping is in query order.
        """

    @abstractmethod
    async def get_keys(self, path: str) -> List[str]:
        """Direct child keys of ``path`` (empty when absent)."""

    @abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Replace the entire value at ``path``."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the value at ``path``."""

    @abstractmethod
    def generate_key(self) -> str:
        """Generate a unique, time-ordered push key."""


class BlobStore(ABC):
    """Hosted object storage addressed by string keys."""

    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str = "image/png") -> str:
        """Upload ``data`` under ``key`` and return its download URL."""

    @abstractmethod
    async def get_download_url(self, key: str) -> str:
        """Download URL for an existing object."""

    @abstractmethod
    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch the bytes behind a download URL."""

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Fetch an object's bytes through the store's object API."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete the object at ``key``."""

    @property
    @abstractmethod
    def public_base_url(self) -> str:
        """Base URL that public object URLs are built on."""

    def public_url(self, key: str) -> str:
        """Public media URL for ``key`` (no download token)."""
        return f"{self.public_base_url}/{quote(key, safe='')}?alt=media"
