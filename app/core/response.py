"""JSON response envelopes.

Dashboard routes (/api/v1) answer ``{data}`` / ``{data, meta}`` and errors
as ``{error: {code, message}}``. Voice-platform routes keep the platform's
flat ``{success}`` / ``{error}`` shape.
"""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.pagination import PageMeta

T = TypeVar("T")

_CAMEL = {"populate_by_name": True, "alias_generator": to_camel}


class DataResponse(BaseModel, Generic[T]):
    """Single-item response envelope: `{ data: {...} }`"""

    data: T

    model_config = _CAMEL


class ListResponse(BaseModel, Generic[T]):
    """Paginated list response envelope: `{ data: [...], meta: {...} }`"""

    data: list[T]
    meta: PageMeta

    model_config = _CAMEL


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """`{ error: { code, message } }` — produced by the registered exception handlers."""

    error: ErrorDetail


class WebhookAck(BaseModel):
    """Voice-platform acknowledgement: `{ success: true }`."""

    success: bool = True


class WebhookError(BaseModel):
    """Voice-platform failure: `{ error: "..." }`."""

    error: str


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Build a paginated response dict for use with ListResponse."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 1,
        },
    }


ERROR_RESPONSES: dict = {
    404: {"model": ErrorResponse, "description": "Not found"},
    409: {"model": ErrorResponse, "description": "Conflict"},
    422: {"model": ErrorResponse, "description": "Validation error"},
}
