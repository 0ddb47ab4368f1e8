from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from PartsCatalogue.dependencies import get_bom_service
from PartsCatalogue.routers.base import BaseRouter, standard_error_handling
from PartsCatalogue.schemas.response import ResponseSchema
from PartsCatalogue.services.bom_service import BomService

router = APIRouter()


@router.get("/models", response_model=ResponseSchema[List[str]])
@standard_error_handling
async def list_models(
    bom_service: BomService = Depends(get_bom_service)
) -> ResponseSchema[List[str]]:
    models = await bom_service.list_models()
    return BaseRouter.build_success_response(
        data=models,
        message=f"Found {len(models)} models"
    )


@router.get("/models/{model_key}/components", response_model=ResponseSchema[Dict[str, Any]])
@standard_error_handling
async def get_components(
    model_key: str,
    bom_service: BomService = Depends(get_bom_service)
) -> ResponseSchema[Dict[str, Any]]:
    components = await bom_service.get_components(model_key)
    return BaseRouter.build_success_response(
        data={material: component.model_dump(by_alias=True) for material, component in components.items()},
        message=f"Found {len(components)} components"
    )
