"""Audit log entry variants and API schemas.

Each action kind is its own model; the ``action`` field is the discriminator.
Device actions must name the device they touched.
"""

import re
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, RootModel, model_validator

from keygate.common.models import as_utc
from keygate.common.schemas import CamelModel
from keygate.audit.models import LogModel

_DETAILS_RE = re.compile(r"^\s*(?P<hostname>.+?)\s*\((?P<mac>[^()]+)\)\s*$")


class LoginEvent(CamelModel):
    action: Literal["login"] = "login"


class _DeviceEvent(CamelModel):
    device_id: Optional[str] = None
    mac_address: str = Field(..., min_length=1, max_length=64)
    hostname: str = Field(..., min_length=1, max_length=255)

    @model_validator(mode="before")
    @classmethod
    def _split_device_details(cls, data: Any) -> Any:
        """Accept the ``deviceDetails`` form, ``"hostname (mac)"``."""
        if not isinstance(data, dict):
            return data
        details = data.get("deviceDetails") or data.get("device_details")
        if details and not (data.get("macAddress") or data.get("mac_address")):
            match = _DETAILS_RE.match(details)
            if match is None:
                raise ValueError("deviceDetails must look like 'hostname (mac)'")
            data = {**data, "macAddress": match["mac"], "hostname": match["hostname"]}
        return data


class IssueKeyEvent(_DeviceEvent):
    action: Literal["issue_key"] = "issue_key"


class ResetEvent(_DeviceEvent):
    action: Literal["reset"] = "reset"


class DeleteEvent(_DeviceEvent):
    action: Literal["delete"] = "delete"


LogEvent = Annotated[
    Union[LoginEvent, IssueKeyEvent, ResetEvent, DeleteEvent],
    Field(discriminator="action"),
]

LogAction = Literal["login", "issue_key", "reset", "delete"]


class LogEntryResponse(CamelModel):
    id: int
    action: LogAction
    user_id: Optional[str] = None
    username: str
    device_id: Optional[str] = None
    device_details: Optional[str] = None
    timestamp: datetime

    @classmethod
    def from_model(cls, entry: LogModel) -> "LogEntryResponse":
        return cls(
            id=entry.id,
            action=entry.action,
            user_id=entry.user_id,
            username=entry.username,
            device_id=entry.device_id,
            device_details=entry.device_details,
            timestamp=as_utc(entry.timestamp),
        )


class LogEntryCreate(RootModel[LogEvent]):
    """Request body for ``POST /logs``; ``.root`` holds the concrete variant."""
