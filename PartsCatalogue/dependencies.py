"""
FastAPI dependency functions for service injection.

Store clients are built once per process from the settings; services are
created per request on top of them. Tests override get_document_store and
get_blob_store (or the service getters) through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Generator

from fastapi import Depends

from PartsCatalogue.clients.base_store import BlobStore, DocumentStore
from PartsCatalogue.clients.exceptions import ConfigurationError as ClientConfigurationError
from PartsCatalogue.clients.firebase import RealtimeDatabaseClient, StorageClient
from PartsCatalogue.clients.memory_store import InMemoryBlobStore, InMemoryDocumentStore
from PartsCatalogue.config.settings import Settings, get_settings
from PartsCatalogue.exceptions import ConfigurationError
from PartsCatalogue.repositories import ApplicationRepository, BoMRepository, PartsRepository
from PartsCatalogue.services.application_pdf_service import ApplicationPdfService
from PartsCatalogue.services.application_service import ApplicationService
from PartsCatalogue.services.bom_service import BomService
from PartsCatalogue.services.image_rehoming_service import ImageRehomingService
from PartsCatalogue.services.part_service import PartService


def build_document_store(settings: Settings) -> DocumentStore:
    settings.validate_backend()
    if settings.store_backend == "firebase":
        try:
            return RealtimeDatabaseClient(
                database_url=settings.firebase_database_url,
                auth_token=settings.firebase_auth_token,
                timeout=settings.request_timeout_seconds,
            )
        except ClientConfigurationError as e:
            raise ConfigurationError(f"Invalid realtime database settings: {e.message}",
                                     config_field="FIREBASE_DATABASE_URL",
                                     config_value=settings.firebase_database_url) from e
    return InMemoryDocumentStore()


def build_blob_store(settings: Settings) -> BlobStore:
    settings.validate_backend()
    if settings.store_backend == "firebase":
        try:
            return StorageClient(
                bucket=settings.firebase_storage_bucket,
                auth_token=settings.firebase_auth_token,
                timeout=settings.request_timeout_seconds,
            )
        except ClientConfigurationError as e:
            raise ConfigurationError(f"Invalid storage settings: {e.message}",
                                     config_field="REQUEST_TIMEOUT_SECONDS",
                                     config_value=str(settings.request_timeout_seconds)) from e
    return InMemoryBlobStore()


@lru_cache()
def get_document_store() -> DocumentStore:
    """
    Get the process-wide document store.

    Raises:
        ConfigurationError: If the configured backend cannot be built
    """
    return build_document_store(get_settings())


@lru_cache()
def get_blob_store() -> BlobStore:
    """
    Get the process-wide blob store.

    Raises:
        ConfigurationError: If the configured backend cannot be built
    """
    return build_blob_store(get_settings())


def get_part_service(
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_document_store),
    blob_store: BlobStore = Depends(get_blob_store),
) -> Generator[PartService, None, None]:
    repository = PartsRepository(store, settings.parts_base_path, settings.parts_override_path)
    yield PartService(repository, blob_store, settings.image_key_prefix)


def get_bom_service(
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_document_store),
) -> Generator[BomService, None, None]:
    yield BomService(BoMRepository(store, settings.bom_path))


def get_application_service(
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_document_store),
    blob_store: BlobStore = Depends(get_blob_store),
) -> Generator[ApplicationService, None, None]:
    repository = ApplicationRepository(store, settings.applications_path)
    rehoming_service = ImageRehomingService(blob_store, repository, settings.image_key_prefix)
    yield ApplicationService(
        repository,
        blob_store,
        rehoming_service,
        id_strategy=settings.application_id_strategy,
        image_key_prefix=settings.image_key_prefix,
    )


def get_application_pdf_service(
    settings: Settings = Depends(get_settings),
    blob_store: BlobStore = Depends(get_blob_store),
) -> Generator[ApplicationPdfService, None, None]:
    yield ApplicationPdfService(blob_store, settings.image_key_prefix)
