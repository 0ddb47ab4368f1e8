"""
REST API Client Implementation

Concrete implementation of BaseAPIClient over httpx. Each call makes exactly
one attempt: failures are classified and raised, never retried.
"""

import json
from typing import Dict, Any, Optional
import httpx
import logging

from .base_client import BaseAPIClient, APIResponse, HTTPMethod
from .exceptions import (
    APIClientError,
    AuthenticationError,
    NotFoundError,
    TimeoutError,
    NetworkError,
    ServerError,
    ConfigurationError
)

logger = logging.getLogger(__name__)


class RESTClient(BaseAPIClient):
    """
    REST API client with consistent error classification
    """

    def __init__(self,
                 base_url: str,
                 api_key: Optional[str] = None,
                 auth_header_name: str = "Authorization",
                 auth_prefix: str = "Bearer",
                 timeout: float = 30,
                 custom_headers: Optional[Dict[str, str]] = None,
                 default_params: Optional[Dict[str, Any]] = None,
                 verify_ssl: bool = True,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize REST API client

        Args:
            base_url: Base URL for the API
            api_key: Token for authentication
            auth_header_name: Name of authentication header (default: Authorization).
                Pass an empty string to send no auth header.
            auth_prefix: Prefix for auth header value (default: Bearer)
            timeout: Request timeout in seconds
            custom_headers: Additional headers to include in requests
            default_params: Query parameters sent with every request
            verify_ssl: Whether to verify SSL certificates
            transport: Optional httpx transport (used by tests to stub the network)
        """
        super().__init__(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            custom_headers=custom_headers,
            default_params=default_params
        )

        self.auth_header_name = auth_header_name
        self.auth_prefix = auth_prefix
        self.verify_ssl = verify_ssl

        self.client_config = {
            "timeout": httpx.Timeout(timeout),
            "verify": verify_ssl,
            "follow_redirects": True
        }
        if transport is not None:
            self.client_config["transport"] = transport

        self.logger = logging.getLogger(f"{__name__}.RESTClient")

    async def request(self,
                      method: HTTPMethod,
                      endpoint: str,
                      params: Optional[Dict[str, Any]] = None,
                      data: Optional[Any] = None,
                      content: Optional[bytes] = None,
                      headers: Optional[Dict[str, str]] = None) -> APIResponse:
        """
        Make a single HTTP request and classify any failure
        """
        url = self._build_url(endpoint)
        merged_headers = self._merge_headers(headers)
        merged_params = self._merge_params(params)

        request_kwargs: Dict[str, Any] = {
            "method": method.value,
            "url": url,
            "params": merged_params or None,
            "headers": merged_headers,
        }
        if content is not None:
            request_kwargs["content"] = content
        elif data is not None:
            # Firebase accepts JSON null / scalars as values, so encode explicitly
            request_kwargs["content"] = json.dumps(data).encode("utf-8")
            merged_headers.setdefault("Content-Type", "application/json")

        self.logger.debug(f"Making {method.value} request to {url}")

        try:
            async with httpx.AsyncClient(**self.client_config) as client:
                response = await client.request(**request_kwargs)
        except httpx.TimeoutException as e:
            self.logger.warning(f"Request timeout for {method.value} {url}: {e}")
            raise TimeoutError(
                f"Request timeout after {self.timeout} seconds",
                timeout_duration=self.timeout,
                url=url
            ) from e
        except httpx.NetworkError as e:
            self.logger.warning(f"Network error for {method.value} {url}: {e}")
            raise NetworkError(f"Network error: {str(e)}", url=url) from e
        except httpx.HTTPError as e:
            self.logger.error(f"HTTP error for {method.value} {url}: {e}")
            raise APIClientError(f"Unexpected error: {str(e)}", url=url) from e

        return self._process_response(response, url)

    def _process_response(self, response: httpx.Response, url: str) -> APIResponse:
        """
        Process HTTP response and raise on error status codes
        """
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                response_data = response.json()
            except json.JSONDecodeError:
                response_data = None
        else:
            response_data = None

        api_response = APIResponse(
            status_code=response.status_code,
            data=response_data,
            headers=dict(response.headers),
            raw_content=response.content
        )

        if 200 <= response.status_code < 300:
            self.logger.debug(f"Successful response: {response.status_code}")
            return api_response

        message = self._error_message(response_data, response.reason_phrase)

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed: {message}",
                status_code=response.status_code,
                response_data=response_data if isinstance(response_data, dict) else None,
                url=url
            )
        elif response.status_code == 404:
            raise NotFoundError(f"Not found: {url}", url=url)
        elif 400 <= response.status_code < 500:
            raise APIClientError(
                f"Client error: {message}",
                status_code=response.status_code,
                response_data=response_data if isinstance(response_data, dict) else None,
                url=url
            )
        elif 500 <= response.status_code < 600:
            raise ServerError(
                f"Server error: {message}",
                status_code=response.status_code,
                url=url
            )

        api_response.success = False
        api_response.error_message = f"Unexpected status code: {response.status_code}"
        return api_response

    @staticmethod
    def _error_message(response_data: Any, fallback: str) -> str:
        # RTDB uses {"error": "..."}; Storage uses {"error": {"message": "..."}}
        if isinstance(response_data, dict):
            error = response_data.get("error")
            if isinstance(error, dict):
                return error.get("message", fallback)
            if isinstance(error, str):
                return error
            return response_data.get("message", fallback)
        return fallback

    def get_authentication_headers(self) -> Dict[str, str]:
        """
        Get authentication headers for requests
        """
        headers = {}

        if self.api_key and self.auth_header_name:
            if self.auth_prefix:
                headers[self.auth_header_name] = f"{self.auth_prefix} {self.api_key}"
            else:
                headers[self.auth_header_name] = self.api_key

        return headers

    def validate_configuration(self) -> None:
        """
        Validate client configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.base_url:
            raise ConfigurationError("Base URL is required")

        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError("Base URL must start with http:// or https://")

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")
