"""
Shared schema building blocks
"""
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case accepted on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(CamelModel):
    """Schema for error responses"""
    success: bool = False
    message: str
    errors: Optional[list] = None


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
