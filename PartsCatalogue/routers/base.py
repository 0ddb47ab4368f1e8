"""
Base router infrastructure for centralized error handling and response construction.

Domain exceptions pass through untouched so the registered exception
handlers render them; anything else is converted to an HTTPException here.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional

from fastapi import HTTPException

from PartsCatalogue.exceptions import PartsCatalogueException
from PartsCatalogue.schemas.response import ResponseSchema

logger = logging.getLogger(__name__)


class BaseRouter:
    """Shared response construction for all routers."""

    @staticmethod
    def build_success_response(
        data: Any = None,
        message: str = "Operation completed successfully",
        page_size: Optional[int] = None,
        next_cursor: Optional[str] = None
    ) -> ResponseSchema:
        """
        Build a standardized success response.

        Args:
            data: Response data
            message: Success message
            page_size: Items per page for paginated responses
            next_cursor: Cursor for the next page, None on the last page
        """
        return ResponseSchema(
            status="success",
            message=message,
            data=data,
            page_size=page_size,
            next_cursor=next_cursor
        )

    @staticmethod
    def handle_exception(e: Exception) -> Exception:
        """Map an exception to what the route should raise."""
        if isinstance(e, (HTTPException, PartsCatalogueException)):
            return e
        elif isinstance(e, ValueError):
            return HTTPException(status_code=400, detail=str(e))
        else:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return HTTPException(status_code=500, detail="Internal server error")


def standard_error_handling(func: Callable) -> Callable:
    """
    Decorator that provides standardized error handling for route functions.

    Usage:
        @standard_error_handling
        async def my_route():
            return BaseRouter.build_success_response(data=result)
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            raise BaseRouter.handle_exception(e)
    return wrapper
