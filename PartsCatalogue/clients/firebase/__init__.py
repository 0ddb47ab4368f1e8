"""
Hosted store clients over the realtime database and storage REST APIs.
"""

from .realtime_database_client import RealtimeDatabaseClient
from .storage_client import StorageClient, STORAGE_API_URL

__all__ = [
    "RealtimeDatabaseClient",
    "StorageClient",
    "STORAGE_API_URL",
]
