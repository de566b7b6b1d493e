"""Pydantic schemas for client activation endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from keygate.common.schemas import CamelModel


class ActivateRequest(CamelModel):
    mac_address: str = Field(..., min_length=1, max_length=64)
    hostname: str = ""
    key: str = Field(..., min_length=1, max_length=64)


class ActivateResponse(CamelModel):
    success: bool
    code: str
    message: str
    device_id: Optional[str] = None
    expiry_date: Optional[datetime] = None


class CheckRequest(CamelModel):
    mac_address: str = Field(..., min_length=1, max_length=64)
    hostname: str = ""


class CheckResponse(CamelModel):
    active: bool
    message: str = ""
