"""Audit log entry model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, model_serializer

from vfm.models.enums import AuditStatus, BackendName

_OMIT_WHEN_EMPTY = ("path", "url", "error")


class AuditLogEntry(BaseModel):
    """One durable record of an upload attempt.

    Field names and the one-object-per-line framing are read by external
    tooling; keep them stable.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    file: str
    path: str = ""
    size: int
    method: BackendName
    account: str
    workspace: str
    status: AuditStatus
    url: str = ""
    error: str = ""

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        for key in _OMIT_WHEN_EMPTY:
            if not data.get(key):
                data.pop(key, None)
        return data
