import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from PartsCatalogue.clients.base_store import DocumentStore, KEY_ORDER
from PartsCatalogue.clients.exceptions import APIClientError
from PartsCatalogue.exceptions import DocumentStoreError, ValidationError
from PartsCatalogue.models.part_models import UPDATABLE_PART_FIELDS

# Configure logging
logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("SPRAS_EN", "Supplier_Name")


def merge_part_records(base: Optional[Mapping[str, Any]],
                       overrides: Optional[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Overlay admin overrides onto the base catalogue, field by field.

    Base keys keep their order; override-only keys follow. Non-record children
    on either side are ignored.
    """
    base = base or {}
    overrides = overrides or {}
    merged: Dict[str, Dict[str, Any]] = {}

    for key, record in base.items():
        if isinstance(record, dict):
            merged[key] = dict(record)

    for key, record in overrides.items():
        if not isinstance(record, dict):
            continue
        if key in merged:
            merged[key].update(record)
        else:
            merged[key] = dict(record)

    return merged


def matches_term(material: str, record: Mapping[str, Any], term: str) -> bool:
    needle = term.lower()
    if needle in str(material).lower():
        return True
    for field in SEARCH_FIELDS:
        value = record.get(field)
        if value is not None and needle in str(value).lower():
            return True
    return False


class PartsRepository:
    """
    Catalogue reads and admin overrides.

    Reads never raise: a store fault is logged and reported as an empty
    result. Override writes raise DocumentStoreError.
    """

    def __init__(self, store: DocumentStore, base_path: str = "material_summary_2025",
                 override_path: str = "Parts"):
        self.store = store
        self.base_path = base_path
        self.override_path = override_path

    async def fetch_all(self) -> Dict[str, Dict[str, Any]]:
        try:
            base, overrides = await asyncio.gather(
                self.store.get(self.base_path),
                self.store.get(self.override_path),
            )
        except Exception as e:
            logger.error(f"Error fetching parts: {e}")
            return {}
        return merge_part_records(base, overrides)

    async def search(self, term: str, limit: int = 50) -> Dict[str, Dict[str, Any]]:
        term = (term or "").strip()
        if not term:
            # Empty search lists the base catalogue only, overrides are not applied
            try:
                base = await self.store.get(self.base_path, order_by=KEY_ORDER, limit_to_first=limit)
            except Exception as e:
                logger.error(f"Error listing parts: {e}")
                return {}
            return {k: v for k, v in (base or {}).items() if isinstance(v, dict)}

        merged = await self.fetch_all()
        results: Dict[str, Dict[str, Any]] = {}
        for material, record in merged.items():
            if matches_term(material, record, term):
                results[material] = record
                if len(results) >= limit:
                    break
        logger.debug(f"Search '{term}' matched {len(results)} parts")
        return results

    async def paginate(self, limit: int = 50,
                       cursor: Optional[str] = None) -> Tuple[Dict[str, Dict[str, Any]], Optional[str]]:
        """
        One page of the override collection, in key order.

        Returns the page's records and the cursor for the next page. The
        cursor is the last key read whenever the page came back full, even if
        some of its children were not records and were left out.
        """
        try:
            if cursor:
                page = await self.store.get(self.override_path, order_by=KEY_ORDER,
                                            start_at=cursor, limit_to_first=limit + 1)
            else:
                page = await self.store.get(self.override_path, order_by=KEY_ORDER, limit_to_first=limit)
        except Exception as e:
            logger.error(f"Error paginating parts: {e}")
            return {}, None

        items = list(page.items()) if isinstance(page, dict) else []
        if cursor and items and items[0][0] == cursor:
            items = items[1:]
        items = items[:limit]

        next_cursor = items[-1][0] if items and len(items) == limit else None
        records = {key: record for key, record in items if isinstance(record, dict)}
        return records, next_cursor

    async def get_by_key(self, material: str) -> Optional[Dict[str, Any]]:
        try:
            base, override = await asyncio.gather(
                self.store.get(f"{self.base_path}/{material}"),
                self.store.get(f"{self.override_path}/{material}"),
            )
        except Exception as e:
            logger.error(f"Error fetching part {material}: {e}")
            return None

        merged = merge_part_records({material: base}, {material: override})
        return merged.get(material)

    async def update_part_data(self, material: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = [field for field in updates if field not in UPDATABLE_PART_FIELDS]
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(unknown)}",
                field_errors={field: "not updatable" for field in unknown},
            )

        path = f"{self.override_path}/{material}"
        try:
            current = await self.store.get(path)
            record = dict(current) if isinstance(current, dict) else {}
            record.update(updates)
            await self.store.set(path, record)
        except APIClientError as e:
            raise DocumentStoreError(f"Failed to update part {material}: {e.message}", path=path) from e

        logger.info(f"Updated part {material}: {sorted(updates)}")
        return record
