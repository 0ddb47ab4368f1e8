from .part_models import Part, BoMComponent, PartUpdate, PartsPage, UPDATABLE_PART_FIELDS
from .application_models import (
    ApplicationStatus,
    ApplicationPriority,
    ApplicationDraft,
    PartApplication,
    ApproveApplicationRequest,
    RejectApplicationRequest,
    STATUS_TRANSITIONS,
)

__all__ = [
    "Part",
    "BoMComponent",
    "PartUpdate",
    "PartsPage",
    "UPDATABLE_PART_FIELDS",
    "ApplicationStatus",
    "ApplicationPriority",
    "ApplicationDraft",
    "PartApplication",
    "ApproveApplicationRequest",
    "RejectApplicationRequest",
    "STATUS_TRANSITIONS",
]
