"""
API Client Exceptions

Transport-level exceptions raised by the REST client and the hosted store
clients built on top of it.
"""

from typing import Optional, Dict, Any


class APIClientError(Exception):
    """Base exception for all API client errors"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response_data: Optional[Dict[str, Any]] = None,
                 url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        self.url = url


class AuthenticationError(APIClientError):
    """Raised when the hosted service rejects our credentials"""

    def __init__(self, message: str = "Authentication failed", **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(message, **kwargs)


class NotFoundError(APIClientError):
    """Raised when the requested object does not exist"""

    def __init__(self, message: str = "Not found", **kwargs):
        super().__init__(message, status_code=404, **kwargs)


class TimeoutError(APIClientError):
    """Raised when API requests timeout"""

    def __init__(self, message: str = "Request timeout",
                 timeout_duration: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_duration = timeout_duration


class InvalidResponseError(APIClientError):
    """Raised when API response is invalid or malformed"""

    def __init__(self, message: str = "Invalid response format",
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected_format = expected_format


class NetworkError(APIClientError):
    """Raised when network-level errors occur"""

    def __init__(self, message: str = "Network error", **kwargs):
        super().__init__(message, **kwargs)


class ServerError(APIClientError):
    """Raised when server returns 5xx errors"""

    def __init__(self, message: str = "Server error", **kwargs):
        super().__init__(message, **kwargs)


class ConfigurationError(APIClientError):
    """Raised when client configuration is invalid"""

    def __init__(self, message: str = "Configuration error", **kwargs):
        super().__init__(message, **kwargs)
