from typing import Any, Dict, List, Mapping, Optional

from PartsCatalogue.clients.base_store import BlobStore, blob_key_for
from PartsCatalogue.clients.exceptions import APIClientError
from PartsCatalogue.exceptions import BlobStoreError, ValidationError
from PartsCatalogue.models.part_models import Part, PartsPage
from PartsCatalogue.repositories.parts_repository import PartsRepository
from PartsCatalogue.services.base_service import BaseService

IMAGE_EXTENSIONS = (".png", ".jpg", ".webp")


class PartService(BaseService):
    """Catalogue browsing plus the admin override and part image operations."""

    def __init__(self, repository: PartsRepository, blob_store: BlobStore, image_key_prefix: str = ""):
        super().__init__()
        self.repository = repository
        self.blob_store = blob_store
        self.image_key_prefix = image_key_prefix

    def _to_parts(self, records: Mapping[str, Dict[str, Any]]) -> Dict[str, Part]:
        parts = {}
        for material, record in records.items():
            try:
                parts[material] = Part.from_record(material, record)
            except ValueError as e:
                self.logger.warning(f"Skipping malformed part {material}: {e}")
        return parts

    async def fetch_all(self) -> Dict[str, Part]:
        return self._to_parts(await self.repository.fetch_all())

    async def search(self, term: str, limit: int = 50) -> Dict[str, Part]:
        return self._to_parts(await self.repository.search(term, limit))

    async def paginate(self, limit: int = 50, cursor: Optional[str] = None) -> PartsPage:
        if limit < 1:
            raise ValidationError("limit must be positive", field_errors={"limit": "must be >= 1"})
        records, next_cursor = await self.repository.paginate(limit, cursor)
        return PartsPage(items=self._to_parts(records), next_cursor=next_cursor)

    async def get_by_key(self, material: str) -> Optional[Part]:
        record = await self.repository.get_by_key(material)
        if record is None:
            return None
        return Part.from_record(material, record)

    async def update_part_data(self, material: str, updates: Mapping[str, Any]) -> Part:
        if not material:
            raise ValidationError("Material code is required", missing_fields=["material"])
        self.log_operation("update", "part", material)
        record = await self.repository.update_part_data(material, dict(updates))
        return Part.from_record(material, record)

    async def hide_part(self, material: str) -> Part:
        return await self.update_part_data(material, {"visible": False})

    async def upload_part_image(self, part_code: str, data: bytes, content_type: Optional[str]) -> str:
        """
        Store an image for a part under the shared image key scheme.

        Returns:
            Download URL of the uploaded image
        """
        if not part_code or not part_code.strip():
            raise ValidationError("Part code is required", missing_fields=["part_code"])
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("File must be an image", field_errors={"image": f"unsupported type {content_type}"})
        if not data:
            raise ValidationError("Image is empty", missing_fields=["image"])

        key = blob_key_for(part_code.strip(), self.image_key_prefix)
        self.log_operation("upload image", "part", part_code)
        try:
            return await self.blob_store.upload(key, data, content_type)
        except APIClientError as e:
            raise BlobStoreError(f"Failed to upload image for {part_code}: {e.message}", path=key) from e

    def get_part_image_urls(self, material: str) -> List[str]:
        """Public image URLs to try for a part, in order."""
        return [
            self.blob_store.public_url(blob_key_for(material, self.image_key_prefix, extension))
            for extension in IMAGE_EXTENSIONS
        ]
