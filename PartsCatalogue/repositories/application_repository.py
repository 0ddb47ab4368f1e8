import logging
from typing import Any, Dict, List, Mapping, Optional

from PartsCatalogue.clients.base_store import DocumentStore, order_snapshot
from PartsCatalogue.clients.exceptions import APIClientError
from PartsCatalogue.exceptions import DocumentStoreError
from PartsCatalogue.models.application_models import PartApplication

logger = logging.getLogger(__name__)


class ApplicationRepository:
    """
    Part applications stored under ``{applications_path}/{id}``.

    get/list degrade to None/[] on store faults; writes propagate them as
    DocumentStoreError.
    """

    def __init__(self, store: DocumentStore, applications_path: str = "PartApplications"):
        self.store = store
        self.applications_path = applications_path

    def _path(self, application_id: str) -> str:
        return f"{self.applications_path}/{application_id}"

    async def get(self, application_id: str) -> Optional[PartApplication]:
        try:
            record = await self.store.get(self._path(application_id))
        except Exception as e:
            logger.error(f"Error fetching application {application_id}: {e}")
            return None

        if not isinstance(record, dict):
            return None
        try:
            return PartApplication.from_record(application_id, record)
        except ValueError as e:
            logger.error(f"Application {application_id} is malformed: {e}")
            return None

    async def list(self) -> List[PartApplication]:
        """All applications, newest submission first."""
        try:
            # Sorted locally; a server-side orderBy needs an .indexOn rule
            data = await self.store.get(self.applications_path)
        except Exception as e:
            logger.error(f"Error listing applications: {e}")
            return []
        if not isinstance(data, dict):
            return []

        applications = []
        for application_id, record in order_snapshot(data, "submittedAt").items():
            if not isinstance(record, dict):
                continue
            try:
                applications.append(PartApplication.from_record(application_id, record))
            except ValueError as e:
                logger.warning(f"Skipping malformed application {application_id}: {e}")
        applications.reverse()
        return applications

    async def list_ids(self) -> List[str]:
        try:
            return await self.store.get_keys(self.applications_path)
        except APIClientError as e:
            raise DocumentStoreError(f"Failed to list applications: {e.message}",
                                     path=self.applications_path) from e

    async def save(self, application: PartApplication) -> None:
        path = self._path(application.id)
        try:
            # The id is the record key, not a stored field
            record = application.to_record()
            record.pop("id", None)
            await self.store.set(path, record)
        except APIClientError as e:
            raise DocumentStoreError(f"Failed to save application {application.id}: {e.message}", path=path) from e

    async def update_fields(self, application_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Overlay ``fields`` onto the stored record and write it back.

        Every other stored field is kept as is, including ones this service
        does not model. Returns the written record.
        """
        path = self._path(application_id)
        try:
            current = await self.store.get(path)
            record = dict(current) if isinstance(current, dict) else {}
            record.update(fields)
            await self.store.set(path, record)
        except APIClientError as e:
            raise DocumentStoreError(f"Failed to update application {application_id}: {e.message}", path=path) from e
        return record

    async def update_image_url(self, application_id: str, image_url: str) -> None:
        """Repoint an application's imageUrl, keeping every other field."""
        await self.update_fields(application_id, {"imageUrl": image_url})

