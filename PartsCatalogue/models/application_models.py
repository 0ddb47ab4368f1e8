from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Allowed status transitions; approved and rejected are terminal
STATUS_TRANSITIONS = {
    ApplicationStatus.PENDING: {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED},
    ApplicationStatus.APPROVED: set(),
    ApplicationStatus.REJECTED: set(),
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ApplicationDraft(BaseModel):
    """
    Unvalidated submission form. Every field is optional here so that the
    workflow, not the parser, decides which missing field to report.
    """
    requested_by: Optional[str] = None
    department: Optional[str] = None
    priority: Optional[str] = ApplicationPriority.MEDIUM.value
    specifications: Optional[str] = None
    supplier: Optional[str] = None
    standard_price: Optional[str] = None
    notes: Optional[str] = ""
    justification: Optional[str] = None


class PartApplication(BaseModel):
    """
    A request for a new part, stored under ``{applications_path}/{id}``.

    Stored with camelCase keys; ``to_record`` / ``from_record`` convert.
    """
    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    id: str
    requested_by: str = Field(alias="requestedBy")
    department: str
    priority: ApplicationPriority = ApplicationPriority.MEDIUM
    specifications: str
    supplier: str
    standard_price: str = Field(alias="standardPrice")
    notes: str = ""
    justification: Optional[str] = None
    submitted_at: str = Field(default_factory=utc_now_iso, alias="submittedAt")
    status: ApplicationStatus = ApplicationStatus.PENDING
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    part_code: Optional[str] = Field(default=None, alias="partCode")
    approved_at: Optional[str] = Field(default=None, alias="approvedAt")
    rejected_at: Optional[str] = Field(default=None, alias="rejectedAt")
    rejection_reason: Optional[str] = Field(default=None, alias="rejectionReason")

    @classmethod
    def from_record(cls, application_id: str, record: Dict[str, Any]) -> "PartApplication":
        data = dict(record)
        data["id"] = application_id
        # standardPrice arrives as a number from older writers
        if data.get("standardPrice") is not None:
            data["standardPrice"] = str(data["standardPrice"])
        return cls.model_validate(data)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def image_identifier(self) -> str:
        """Identifier the application's image is keyed by."""
        if self.status == ApplicationStatus.APPROVED and self.part_code:
            return self.part_code
        return self.id


class ApproveApplicationRequest(BaseModel):
    part_code: str


class RejectApplicationRequest(BaseModel):
    reason: Optional[str] = None
