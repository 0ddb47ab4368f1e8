"""
Base service abstraction for consistent logging and validation.

Services hold their repositories and hosted-store clients; this class only
gives them a per-service logger and the shared input checks.
"""

import logging
from abc import ABC
from typing import Any, Dict, List, Optional

from PartsCatalogue.exceptions import ValidationError

logger = logging.getLogger(__name__)


class BaseService(ABC):
    """
    Base service class providing logging and validation helpers.

    Usage:
        class BomService(BaseService):
            async def list_models(self):
                self.log_operation("list", "BoM model")
                ...
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def validate_required_fields(self, data: Dict[str, Any], required_fields: List[str]) -> None:
        """
        Validate that required fields are present in the data.

        Fields are checked in order and the first missing one is reported, so
        callers can show a single actionable message.

        Raises:
            ValidationError: If any required field is missing or blank
        """
        missing_fields = []
        for field in required_fields:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing_fields.append(field)

        if missing_fields:
            raise ValidationError(
                f"Missing required field: {missing_fields[0]}",
                missing_fields=missing_fields,
            )

    def log_operation(self, operation: str, entity_type: str, entity_id: Optional[str] = None):
        """
        Log service operations for debugging and audit purposes.

        Args:
            operation: The operation being performed (submit, approve, update, etc.)
            entity_type: The type of entity being operated on
            entity_id: Optional ID of the entity
        """
        entity_info = f" (ID: {entity_id})" if entity_id else ""
        self.logger.info(f"Starting {operation} operation for {entity_type}{entity_info}")
