"""Shared schema base and the health-check payload."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Dashboard-facing schemas: snake_case in Python, camelCase on the wire.

    ``from_attributes`` lets routers validate ORM rows directly.
    """

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class HealthResponse(CamelModel):
    """Returned by /health. The flags report which outbound integrations are configured."""

    status: str = "ok"
    app: str
    env: str
    ai_enabled: bool = False
    email_enabled: bool = False
