"""Configuration models. Every field has a default so no file is required."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

_DEFAULT_TIMEOUT_S = 300.0


class CmsBackendConfig(BaseModel):
    """Legacy CMS FilePicker backend settings."""

    host_template: str = "https://{account}.vtexcommercestable.com.br"
    asset_host: str = "vtexassets.com"
    timeout_s: float = Field(default=_DEFAULT_TIMEOUT_S, gt=0)

    @field_validator("host_template")
    @classmethod
    def _require_account_placeholder(cls, value: str) -> str:
        if "{account}" not in value:
            raise ValueError("host_template must contain '{account}'")
        return value.rstrip("/")


class GraphQLBackendConfig(BaseModel):
    """GraphQL multipart upload backend settings."""

    endpoint_template: str = "https://{account}.myvtex.com/_v/private/graphql/v1"
    asset_host: str = "vtexassets.com"
    bucket: str = "images"
    timeout_s: float = Field(default=_DEFAULT_TIMEOUT_S, gt=0)

    @field_validator("endpoint_template")
    @classmethod
    def _require_account_placeholder(cls, value: str) -> str:
        if "{account}" not in value:
            raise ValueError("endpoint_template must contain '{account}'")
        return value


class BatchConfig(BaseModel):
    """Scheduler defaults for directory uploads."""

    workers: int = Field(default=3, ge=1)
    delay_s: float = Field(default=0.5, ge=0)
    recursive: bool = False


class AuditConfig(BaseModel):
    """Audit log location. None means the per-user state directory."""

    path: Path | None = None


class SessionConfig(BaseModel):
    """Where the VTEX CLI keeps its session files."""

    directory: Path = Path("~/.vtex/session")
    min_token_length: int = Field(default=10, ge=1)


class Config(BaseModel):
    """Root configuration."""

    cms: CmsBackendConfig = Field(default_factory=CmsBackendConfig)
    graphql: GraphQLBackendConfig = Field(default_factory=GraphQLBackendConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
