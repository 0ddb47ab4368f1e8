"""
Client layer for PartsCatalogue

HTTP transport plus the hosted document store and blob store clients that
repositories talk to.
"""

from .base_client import BaseAPIClient, APIResponse, HTTPMethod
from .rest_client import RESTClient
from .base_store import DocumentStore, BlobStore, blob_key_for
from .exceptions import (
    APIClientError,
    AuthenticationError,
    NotFoundError,
    TimeoutError,
    InvalidResponseError
)

__all__ = [
    "BaseAPIClient",
    "APIResponse",
    "HTTPMethod",
    "RESTClient",
    "DocumentStore",
    "BlobStore",
    "blob_key_for",
    "APIClientError",
    "AuthenticationError",
    "NotFoundError",
    "TimeoutError",
    "InvalidResponseError"
]
