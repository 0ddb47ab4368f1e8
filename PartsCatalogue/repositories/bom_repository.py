import logging
from typing import Any, Dict, List

from PartsCatalogue.clients.base_store import DocumentStore

logger = logging.getLogger(__name__)


class BoMRepository:
    """Read-only access to bill-of-materials records under ``BoM/{model_key}``."""

    def __init__(self, store: DocumentStore, bom_path: str = "BoM"):
        self.store = store
        self.bom_path = bom_path

    async def list_models(self) -> List[str]:
        try:
            return await self.store.get_keys(self.bom_path)
        except Exception as e:
            logger.error(f"Error listing BoM models: {e}")
            return []

    async def get_components(self, model_key: str) -> Dict[str, Dict[str, Any]]:
        """Structured children of one model; scalar children are skipped."""
        try:
            data = await self.store.get(f"{self.bom_path}/{model_key}")
        except Exception as e:
            logger.error(f"Error fetching BoM {model_key}: {e}")
            return {}

        if not isinstance(data, dict):
            return {}
        return {material: record for material, record in data.items() if isinstance(record, dict)}
