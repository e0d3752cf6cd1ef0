"""Session model supplied by the VTEX CLI login."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    """Authenticated VTEX CLI session. Read-only input."""

    model_config = ConfigDict(frozen=True)

    account: str
    workspace: str
    login: str = ""
    token: str = Field(repr=False)
