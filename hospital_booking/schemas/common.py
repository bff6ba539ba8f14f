from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[DataT]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class PaginatedResponse(CamelModel, Generic[DataT]):
    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    data: List[DataT]


class MessageResponse(CamelModel):
    success: bool = True
    message: str


def paginate(items, total: int, page: int, limit: int) -> dict:
    return {
        "success": True,
        "count": len(items),
        "total": total,
        "total_pages": (total + limit - 1) // limit if limit else 0,
        "current_page": page,
        "data": items,
    }
