"""Shared schemas"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """API response envelope"""

    success: bool
    data: T | None = None
    message: str | None = None
    error: str | None = None
