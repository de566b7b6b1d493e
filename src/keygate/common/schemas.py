"""Shared Pydantic schemas for Keygate."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "keygate"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""


class SuccessResponse(BaseModel):
    success: bool = True
    message: str = ""
