from typing import Dict, List

from PartsCatalogue.models.part_models import BoMComponent
from PartsCatalogue.repositories.bom_repository import BoMRepository
from PartsCatalogue.services.base_service import BaseService


class BomService(BaseService):

    def __init__(self, repository: BoMRepository):
        super().__init__()
        self.repository = repository

    async def list_models(self) -> List[str]:
        return await self.repository.list_models()

    async def get_components(self, model_key: str) -> Dict[str, BoMComponent]:
        records = await self.repository.get_components(model_key)
        components = {
            material: BoMComponent.from_record(material, record)
            for material, record in records.items()
        }
        self.logger.debug(f"BoM {model_key}: {len(components)} components")
        return components
