from typing import List, Optional

from PartsCatalogue.clients.base_store import BlobStore, blob_key_for
from PartsCatalogue.clients.exceptions import APIClientError
from PartsCatalogue.exceptions import (
    ApplicationNotFoundError,
    BlobStoreError,
    DocumentStoreError,
    InvalidStatusTransitionError,
    ValidationError,
)
from PartsCatalogue.models.application_models import (
    ApplicationDraft,
    ApplicationPriority,
    ApplicationStatus,
    PartApplication,
    STATUS_TRANSITIONS,
    utc_now_iso,
)
from PartsCatalogue.repositories.application_repository import ApplicationRepository
from PartsCatalogue.services.base_service import BaseService
from PartsCatalogue.services.image_rehoming_service import ImageRehomingService, RehomeResult

REQUIRED_FIELDS = ["requested_by", "department", "specifications", "supplier", "standard_price"]

ID_STRATEGY_PUSH = "push"
ID_STRATEGY_SEQUENTIAL = "sequential"


class ApplicationService(BaseService):
    """
    New-part application workflow: submit, review and decide.

    Applications start pending and move once, to approved or rejected.
    Approval writes the decision first; moving the photo to the part code's
    key happens afterwards and can never undo the approval.
    """

    def __init__(self,
                 repository: ApplicationRepository,
                 blob_store: BlobStore,
                 rehoming_service: ImageRehomingService,
                 id_strategy: str = ID_STRATEGY_PUSH,
                 image_key_prefix: str = ""):
        super().__init__()
        self.repository = repository
        self.blob_store = blob_store
        self.rehoming_service = rehoming_service
        self.id_strategy = id_strategy
        self.image_key_prefix = image_key_prefix

    async def _next_id(self) -> str:
        if self.id_strategy == ID_STRATEGY_SEQUENTIAL:
            # Count-based ids race when two submissions overlap
            existing = await self.repository.list_ids()
            return f"APP{len(existing) + 1:04d}"
        return self.repository.new_key()

    def _validate_draft(self, draft: ApplicationDraft, image_data: Optional[bytes],
                        content_type: Optional[str]) -> ApplicationPriority:
        self.validate_required_fields(draft.model_dump(), REQUIRED_FIELDS)
        if not image_data:
            raise ValidationError("Missing required field: image", missing_fields=["image"])
        if content_type and not content_type.startswith("image/"):
            raise ValidationError("Attachment must be an image", field_errors={"image": f"unsupported type {content_type}"})

        try:
            return ApplicationPriority((draft.priority or ApplicationPriority.MEDIUM.value).lower())
        except ValueError:
            allowed = ", ".join(p.value for p in ApplicationPriority)
            raise ValidationError(f"Priority must be one of: {allowed}",
                                  field_errors={"priority": f"invalid value {draft.priority}"})

    async def submit(self, draft: ApplicationDraft, image_data: Optional[bytes],
                     content_type: Optional[str] = "image/png") -> str:
        """
        Validate and store a new application with its photo.

        Returns:
            The new application's identifier

        Raises:
            ValidationError: Before any remote call, naming the first missing field
            BlobStoreError: If the photo upload fails
            DocumentStoreError: If the record cannot be written
        """
        priority = self._validate_draft(draft, image_data, content_type)

        application_id = await self._next_id()
        self.log_operation("submit", "application", application_id)

        key = blob_key_for(application_id, self.image_key_prefix)
        try:
            image_url = await self.blob_store.upload(key, image_data, content_type or "image/png")
        except APIClientError as e:
            raise BlobStoreError(f"Failed to upload image for {application_id}: {e.message}", path=key) from e

        application = PartApplication(
            id=application_id,
            requested_by=draft.requested_by.strip(),
            department=draft.department.strip(),
            priority=priority,
            specifications=draft.specifications.strip(),
            supplier=draft.supplier.strip(),
            standard_price=draft.standard_price.strip(),
            notes=draft.notes or "",
            justification=draft.justification or None,
            submitted_at=utc_now_iso(),
            status=ApplicationStatus.PENDING,
            image_url=image_url,
        )
        try:
            await self.repository.save(application)
        except DocumentStoreError:
            await self._discard_image(key)
            raise
        self.logger.info(f"Submitted application {application_id}")
        return application_id

    async def _discard_image(self, key: str) -> None:
        try:
            await self.blob_store.delete(key)
        except Exception as e:
            self.logger.warning(f"Could not remove orphaned image {key}: {e}")

    async def list(self) -> List[PartApplication]:
        return await self.repository.list()

    async def get(self, application_id: str) -> Optional[PartApplication]:
        return await self.repository.get(application_id)

    async def _get_for_transition(self, application_id: str, new_status: ApplicationStatus) -> PartApplication:
        application = await self.repository.get(application_id)
        if application is None:
            raise ApplicationNotFoundError(f"Application not found: {application_id}", application_id=application_id)
        if new_status not in STATUS_TRANSITIONS[application.status]:
            raise InvalidStatusTransitionError(
                f"Application {application_id} is {application.status.value} and cannot be {new_status.value}",
                application_id=application_id,
                current_status=application.status.value,
                requested_status=new_status.value,
            )
        return application

    async def approve(self, application_id: str, part_code: str, rehome_image: bool = True) -> PartApplication:
        """
        Approve a pending application under ``part_code``.

        The approval is written first and its failure propagates. With
        ``rehome_image`` the photo is then moved to the part code's key; that
        step only logs on failure.
        """
        if not part_code or not part_code.strip():
            raise ValidationError("Part code is required", missing_fields=["part_code"])
        part_code = part_code.strip()

        application = await self._get_for_transition(application_id, ApplicationStatus.APPROVED)
        self.log_operation("approve", "application", application_id)

        record = await self.repository.update_fields(application_id, {
            "status": ApplicationStatus.APPROVED.value,
            "partCode": part_code,
            "approvedAt": utc_now_iso(),
        })
        approved = PartApplication.from_record(application.id, record)
        self.logger.info(f"Approved application {application_id} as part {part_code}")

        if rehome_image:
            result = await self.rehome_image(application_id, part_code)
            if result.success and result.image_url:
                approved = approved.model_copy(update={"image_url": result.image_url})
        return approved

    async def rehome_image(self, application_id: str, part_code: str) -> RehomeResult:
        """Best-effort photo move; never raises."""
        try:
            return await self.rehoming_service.rehome_application_image(application_id, part_code)
        except Exception as e:
            self.logger.warning(f"Image re-homing for {application_id} failed: {e}")
            return RehomeResult(success=False, error=str(e))

    async def reject(self, application_id: str, reason: Optional[str] = None) -> PartApplication:
        application = await self._get_for_transition(application_id, ApplicationStatus.REJECTED)
        self.log_operation("reject", "application", application_id)

        fields = {"status": ApplicationStatus.REJECTED.value, "rejectedAt": utc_now_iso()}
        if reason and reason.strip():
            fields["rejectionReason"] = reason.strip()
        record = await self.repository.update_fields(application_id, fields)
        self.logger.info(f"Rejected application {application_id}")
        return PartApplication.from_record(application.id, record)
