import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from fastapi.responses import Response

from PartsCatalogue.dependencies import get_application_pdf_service, get_application_service
from PartsCatalogue.exceptions import ApplicationNotFoundError
from PartsCatalogue.models.application_models import (
    ApplicationDraft,
    ApproveApplicationRequest,
    RejectApplicationRequest,
)
from PartsCatalogue.routers.base import BaseRouter, standard_error_handling
from PartsCatalogue.schemas.response import ResponseSchema
from PartsCatalogue.services.application_pdf_service import ApplicationPdfService
from PartsCatalogue.services.application_service import ApplicationService

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("", response_model=ResponseSchema[Dict[str, str]])
@standard_error_handling
async def submit_application(
    requested_by: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    priority: Optional[str] = Form("medium"),
    specifications: Optional[str] = Form(None),
    supplier: Optional[str] = Form(None),
    standard_price: Optional[str] = Form(None),
    notes: Optional[str] = Form(""),
    justification: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    application_service: ApplicationService = Depends(get_application_service)
) -> ResponseSchema[Dict[str, str]]:
    draft = ApplicationDraft(
        requested_by=requested_by,
        department=department,
        priority=priority,
        specifications=specifications,
        supplier=supplier,
        standard_price=standard_price,
        notes=notes,
        justification=justification,
    )
    image_data = await image.read() if image is not None else None
    content_type = image.content_type if image is not None else None

    application_id = await application_service.submit(draft, image_data, content_type)
    return BaseRouter.build_success_response(
        data={"id": application_id},
        message="Application submitted successfully"
    )


@router.get("", response_model=ResponseSchema[List[Dict[str, Any]]])
@standard_error_handling
async def list_applications(
    application_service: ApplicationService = Depends(get_application_service)
) -> ResponseSchema[List[Dict[str, Any]]]:
    applications = await application_service.list()
    return BaseRouter.build_success_response(
        data=[application.to_record() for application in applications],
        message=f"Found {len(applications)} applications"
    )


@router.get("/{application_id}", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def get_application(
    application_id: str,
    application_service: ApplicationService = Depends(get_application_service)
) -> ResponseSchema[Dict[str, Any]]:
    application = await application_service.get(application_id)
    if application is None:
        raise ApplicationNotFoundError(f"Application not found: {application_id}", application_id=application_id)
    return BaseRouter.build_success_response(
        data=application.to_record(),
        message="Application retrieved successfully"
    )


@router.post("/{application_id}/approve", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def approve_application(
    application_id: str,
    request: ApproveApplicationRequest,
    background_tasks: BackgroundTasks,
    application_service: ApplicationService = Depends(get_application_service)
) -> ResponseSchema[Dict[str, Any]]:
    application = await application_service.approve(application_id, request.part_code, rehome_image=False)
    # Photo move runs after the response; its outcome is only logged
    background_tasks.add_task(application_service.rehome_image, application_id, application.part_code)
    return BaseRouter.build_success_response(
        data=application.to_record(),
        message=f"Application approved as part {application.part_code}"
    )


@router.post("/{application_id}/reject", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def reject_application(
    application_id: str,
    request: RejectApplicationRequest,
    application_service: ApplicationService = Depends(get_application_service)
) -> ResponseSchema[Dict[str, Any]]:
    application = await application_service.reject(application_id, request.reason)
    return BaseRouter.build_success_response(
        data=application.to_record(),
        message="Application rejected"
    )


@router.get("/{application_id}/pdf")
@standard_error_handling
async def download_application_pdf(
    application_id: str,
    application_service: ApplicationService = Depends(get_application_service),
    pdf_service: ApplicationPdfService = Depends(get_application_pdf_service)
) -> Response:
    application = await application_service.get(application_id)
    if application is None:
        raise ApplicationNotFoundError(f"Application not found: {application_id}", application_id=application_id)

    pdf_bytes = await pdf_service.render(application)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_service.filename(application)}"'}
    )
