"""
Realtime Database REST client

DocumentStore implementation over the hosted realtime database's REST API:
``GET|PUT|DELETE {database_url}/{path}.json``. Query parameters are
JSON-encoded as the REST API requires. REST responses do not preserve query
order, so ordered results are re-sorted locally with the same ordering rules.
"""

import json
import logging
from typing import Any, List, Optional

import httpx

from PartsCatalogue.clients.base_store import DocumentStore, PushKeyGenerator, apply_query, KEY_ORDER
from PartsCatalogue.clients.rest_client import RESTClient

logger = logging.getLogger(__name__)


class RealtimeDatabaseClient(DocumentStore):
    """Document store backed by the realtime database REST API."""

    def __init__(self,
                 database_url: str,
                 auth_token: Optional[str] = None,
                 timeout: float = 30,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        default_params = {"auth": auth_token} if auth_token else None
        # The database authenticates with the ?auth= query parameter, not a header
        self.client = RESTClient(
            base_url=database_url,
            auth_header_name="",
            timeout=timeout,
            default_params=default_params,
            transport=transport,
        )
        self.client.validate_configuration()
        self.key_generator = PushKeyGenerator()
        self.logger = logging.getLogger(f"{__name__}.RealtimeDatabaseClient")

    @staticmethod
    def _endpoint(path: str) -> str:
        return f"{path.strip('/')}.json"

    async def get(self,
                  path: str,
                  order_by: Optional[str] = None,
                  start_at: Optional[Any] = None,
                  limit_to_first: Optional[int] = None) -> Any:
        params = {}
        if start_at is not None or limit_to_first is not None:
            order_by = order_by or KEY_ORDER
        if order_by is not None:
            params["orderBy"] = json.dumps(order_by)
        if start_at is not None:
            params["startAt"] = json.dumps(start_at)
        if limit_to_first is not None:
            params["limitToFirst"] = limit_to_first

        self.logger.debug(f"GET {path} params={params}")
        response = await self.client.get(self._endpoint(path), params=params or None)
        value = response.data

        if order_by is not None and isinstance(value, dict):
            value = apply_query(value, order_by=order_by, start_at=start_at, limit_to_first=limit_to_first)
        return value

    async def get_keys(self, path: str) -> List[str]:
        response = await self.client.get(self._endpoint(path), params={"shallow": "true"})
        value = response.data
        if isinstance(value, dict):
            return list(value.keys())
        return []

    async def set(self, path: str, value: Any) -> None:
        self.logger.debug(f"PUT {path}")
        await self.client.put(self._endpoint(path), data=value)

    async def delete(self, path: str) -> None:
        self.logger.debug(f"DELETE {path}")
        await self.client.delete(self._endpoint(path))

    def generate_key(self) -> str:
        return self.key_generator.generate()
