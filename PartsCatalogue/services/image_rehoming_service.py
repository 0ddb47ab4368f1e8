"""
Image re-homing

Moves an application's photo from its application-keyed object to the
approved part code's key. The blob store has no copy primitive, so the bytes
are fetched and re-uploaded:

1. direct: fetch the bytes behind the source download URL and upload them
   unmodified;
2. fallback, when the direct fetch fails: download the object through the
   store's object API, decode it with Pillow and redraw it onto a fresh RGBA
   surface, then upload the PNG encoding. The result is visually equivalent,
   not byte-identical.

The source object is deleted only after the upload succeeds. Re-homing is
best-effort: failures are logged and reported in the result, never raised.
"""

import asyncio
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image

from PartsCatalogue.clients.base_store import BlobStore, blob_key_for
from PartsCatalogue.exceptions import ImageRehomingError
from PartsCatalogue.repositories.application_repository import ApplicationRepository
from PartsCatalogue.services.base_service import BaseService

METHOD_DIRECT = "direct"
METHOD_REDRAWN = "redrawn"
METHOD_SKIPPED = "skipped"


@dataclass
class RehomeResult:
    success: bool
    method: Optional[str] = None
    image_url: Optional[str] = None
    error: Optional[str] = None


def redraw_image(data: bytes) -> bytes:
    """Decode ``data`` and re-encode its pixels as an RGBA PNG."""
    with Image.open(BytesIO(data)) as source:
        source = source.convert("RGBA")
        surface = Image.new("RGBA", source.size, (0, 0, 0, 0))
        surface.paste(source, (0, 0))

    buffer = BytesIO()
    surface.save(buffer, format="PNG")
    return buffer.getvalue()


class ImageRehomingService(BaseService):

    def __init__(self, blob_store: BlobStore, application_repository: ApplicationRepository,
                 image_key_prefix: str = ""):
        super().__init__()
        self.blob_store = blob_store
        self.application_repository = application_repository
        self.image_key_prefix = image_key_prefix

    async def rehome_application_image(self, application_id: str, part_code: str) -> RehomeResult:
        source_key = blob_key_for(application_id, self.image_key_prefix)
        destination_key = blob_key_for(part_code, self.image_key_prefix)
        if source_key == destination_key:
            return RehomeResult(success=True, method=METHOD_SKIPPED)

        self.log_operation("rehome image", "application", application_id)
        method = METHOD_DIRECT
        try:
            source_url = await self.blob_store.get_download_url(source_key)
            try:
                data = await self.blob_store.fetch_bytes(source_url)
            except Exception as e:
                self.logger.warning(f"Direct fetch of {source_key} failed ({e}), redrawing from object download")
                method = METHOD_REDRAWN
                raw = await self.blob_store.download(source_key)
                data = await asyncio.to_thread(redraw_image, raw)

            image_url = await self.blob_store.upload(destination_key, data, "image/png")

            try:
                await self.blob_store.delete(source_key)
            except Exception as e:
                self.logger.warning(f"Could not delete {source_key} after re-homing: {e}")

            await self.application_repository.update_image_url(application_id, image_url)
        except Exception as e:
            error = ImageRehomingError(
                f"Re-homing {source_key} to {destination_key} failed: {e}",
                source_key=source_key,
                destination_key=destination_key,
            )
            self.logger.warning(error.message, extra={"error_code": error.error_code, "details": error.details})
            return RehomeResult(success=False, method=method, error=error.message)

        self.logger.info(f"Re-homed {source_key} to {destination_key} ({method})")
        return RehomeResult(success=True, method=method, image_url=image_url)
