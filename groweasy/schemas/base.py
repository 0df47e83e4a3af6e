"""
Base Schema Classes for Pydantic Models

RULE: All response schemas that use `from_attributes=True` MUST inherit from BaseResponseSchema.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer

from groweasy.core.utils import total_pages


# Money is kept as Decimal internally and emitted as a JSON number
MoneyValue = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BaseResponseSchema(BaseModel):
    """
    Base class for all response schemas that read from ORM models.

    Usage:
        class ProductResponse(BaseResponseSchema):
            id: UUID
            name: str
            seller_id: Optional[UUID] = None
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """Base class for create/input schemas."""
    model_config = ConfigDict(
        # Allow extra fields to be ignored (forward compatibility)
        extra='ignore',
        str_strip_whitespace=True,
    )


class BaseUpdateSchema(BaseModel):
    """
    Base class for update/patch schemas.

    All fields are optional; only the ones sent are applied
    (use model_dump(exclude_unset=True)).
    """
    model_config = ConfigDict(
        extra='ignore',
        str_strip_whitespace=True,
    )


def reject_null(value):
    """Partial updates may omit a required column but never clear it."""
    if value is None:
        raise ValueError("may not be null")
    return value


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(BaseModel):
    message: str


def page_info(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=total_pages(total, limit))
