import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from PartsCatalogue.dependencies import get_part_service
from PartsCatalogue.exceptions import PartNotFoundError
from PartsCatalogue.models.part_models import Part, PartUpdate
from PartsCatalogue.routers.base import BaseRouter, standard_error_handling
from PartsCatalogue.schemas.response import ResponseSchema
from PartsCatalogue.services.part_service import PartService

router = APIRouter()

logger = logging.getLogger(__name__)


def _dump_parts(parts: Dict[str, Part]) -> Dict[str, Dict[str, Any]]:
    return {material: part.model_dump(by_alias=True) for material, part in parts.items()}


@router.get("/search", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def search_parts(
    q: str = Query("", description="Matches material code, description or supplier"),
    limit: int = Query(50, ge=1, le=1000),
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, Any]]:
    parts = await part_service.search(q, limit)
    return BaseRouter.build_success_response(
        data=_dump_parts(parts),
        message=f"Found {len(parts)} parts"
    )


@router.get("/page", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def get_parts_page(
    limit: int = Query(50, ge=1, le=1000),
    cursor: Optional[str] = Query(None, description="Last key of the previous page"),
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, Any]]:
    page = await part_service.paginate(limit, cursor)
    return BaseRouter.build_success_response(
        data=_dump_parts(page.items),
        message=f"Retrieved {len(page.items)} parts",
        page_size=limit,
        next_cursor=page.next_cursor
    )


@router.get("/all", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def get_all_parts(
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, Any]]:
    parts = await part_service.fetch_all()
    return BaseRouter.build_success_response(
        data=_dump_parts(parts),
        message=f"Retrieved {len(parts)} parts"
    )


@router.get("/{material}", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def get_part(
    material: str,
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, Any]]:
    part = await part_service.get_by_key(material)
    if part is None:
        raise PartNotFoundError(f"Part not found: {material}", material=material)
    return BaseRouter.build_success_response(
        data=part.model_dump(by_alias=True),
        message="Part retrieved successfully"
    )


@router.patch("/{material}", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def update_part(
    material: str,
    update: PartUpdate,
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, Any]]:
    part = await part_service.update_part_data(material, update.model_dump(exclude_unset=True))
    return BaseRouter.build_success_response(
        data=part.model_dump(by_alias=True),
        message=f"Part '{material}' updated"
    )


@router.post("/{material}/hide", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def hide_part(
    material: str,
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, Any]]:
    part = await part_service.hide_part(material)
    return BaseRouter.build_success_response(
        data=part.model_dump(by_alias=True),
        message=f"Part '{material}' hidden"
    )


@router.post("/{material}/image", response_model=ResponseSchema[Dict[str, str]])
@standard_error_handling
async def upload_part_image(
    material: str,
    image: UploadFile = File(...),
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[Dict[str, str]]:
    data = await image.read()
    url = await part_service.upload_part_image(material, data, image.content_type)
    return BaseRouter.build_success_response(
        data={"material": material, "image_url": url},
        message="Image uploaded successfully"
    )


@router.get("/{material}/image-urls", response_model=ResponseSchema[List[str]])
@standard_error_handling
async def get_part_image_urls(
    material: str,
    part_service: PartService = Depends(get_part_service)
) -> ResponseSchema[List[str]]:
    return BaseRouter.build_success_response(
        data=part_service.get_part_image_urls(material),
        message="Image URLs in lookup order"
    )
