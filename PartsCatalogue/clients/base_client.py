"""
Base API Client Interface

Abstract base class defining the contract for the HTTP clients the hosted
store clients are built on. Provides standardized request helpers with
consistent error handling.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class HTTPMethod(Enum):
    """Supported HTTP methods"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


@dataclass
class APIResponse:
    """Standardized API response container"""
    status_code: int
    data: Optional[Any] = None
    headers: Optional[Dict[str, str]] = None
    raw_content: Optional[Union[str, bytes]] = None
    success: bool = True
    error_message: Optional[str] = None

    def __post_init__(self):
        """Automatically determine success based on status code"""
        if self.status_code < 200 or self.status_code >= 400:
            self.success = False


class BaseAPIClient(ABC):
    """
    Abstract base class for all API clients.

    Subclasses implement the transport; this class owns URL building and
    header merging so every client authenticates the same way.
    """

    def __init__(self,
                 base_url: str,
                 api_key: Optional[str] = None,
                 timeout: float = 30,
                 custom_headers: Optional[Dict[str, str]] = None,
                 default_params: Optional[Dict[str, Any]] = None):
        """
        Initialize base API client

        Args:
            base_url: Base URL for the API
            api_key: API key or token for authentication (if required)
            timeout: Request timeout in seconds
            custom_headers: Additional headers to include in requests
            default_params: Query parameters sent with every request
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.custom_headers = custom_headers or {}
        self.default_params = default_params or {}

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def request(self,
                      method: HTTPMethod,
                      endpoint: str,
                      params: Optional[Dict[str, Any]] = None,
                      data: Optional[Any] = None,
                      content: Optional[bytes] = None,
                      headers: Optional[Dict[str, str]] = None) -> APIResponse:
        """
        Make an HTTP request to the API

        Args:
            method: HTTP method to use
            endpoint: API endpoint (relative to base_url) or an absolute URL
            params: Query parameters
            data: JSON request body
            content: Raw request body
            headers: Additional headers

        Returns:
            APIResponse object containing response data

        Raises:
            APIClientError: For various API-related errors
        """
        pass

    @abstractmethod
    def get_authentication_headers(self) -> Dict[str, str]:
        """
        Get headers required for API authentication

        Returns:
            Dictionary of authentication headers
        """
        pass

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None) -> APIResponse:
        """Convenience method for GET requests"""
        return await self.request(HTTPMethod.GET, endpoint, params=params, headers=headers)

    async def post(self, endpoint: str, data: Optional[Any] = None,
                   params: Optional[Dict[str, Any]] = None,
                   content: Optional[bytes] = None,
                   headers: Optional[Dict[str, str]] = None) -> APIResponse:
        """Convenience method for POST requests"""
        return await self.request(HTTPMethod.POST, endpoint, params=params,
                                  data=data, content=content, headers=headers)

    async def put(self, endpoint: str, data: Optional[Any] = None,
                  params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None) -> APIResponse:
        """Convenience method for PUT requests"""
        return await self.request(HTTPMethod.PUT, endpoint, params=params,
                                  data=data, headers=headers)

    async def delete(self, endpoint: str, params: Optional[Dict[str, Any]] = None,
                     headers: Optional[Dict[str, str]] = None) -> APIResponse:
        """Convenience method for DELETE requests"""
        return await self.request(HTTPMethod.DELETE, endpoint, params=params, headers=headers)

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint; absolute URLs pass through untouched"""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        endpoint = endpoint.lstrip('/')
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint}"

    def _merge_headers(self, additional_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Merge authentication, custom, and additional headers"""
        headers = {}
        headers.update(self.get_authentication_headers())
        headers.update(self.custom_headers)
        if additional_headers:
            headers.update(additional_headers)
        return headers

    def _merge_params(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge default query parameters with request-specific ones"""
        merged = dict(self.default_params)
        if params:
            merged.update(params)
        return merged
