from typing import Optional, Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")

class ResponseSchema(BaseModel, Generic[T]):
    status: str
    message: str
    data: Optional[T] = None
    page_size: Optional[int] = None  # For pagination
    next_cursor: Optional[str] = None  # Last key of a full page
