from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None
    message: str | None = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class DecisionRequest(BaseModel):
    approve: bool
    comment: str | None = None


def ok(data: Any = None, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)


def failure(message: str, data: Any = None) -> ApiResponse:
    return ApiResponse(success=False, data=data, message=message)
