"""Data models for vfm."""

from vfm.models.audit import AuditLogEntry
from vfm.models.config import (
    AuditConfig,
    BatchConfig,
    CmsBackendConfig,
    Config,
    GraphQLBackendConfig,
    SessionConfig,
)
from vfm.models.enums import AuditStatus, BackendName
from vfm.models.session import Session
from vfm.models.upload import BatchSummary, PreflightReport, UploadResult, UploadTask

__all__ = [
    "AuditConfig",
    "AuditLogEntry",
    "AuditStatus",
    "BackendName",
    "BatchConfig",
    "BatchSummary",
    "CmsBackendConfig",
    "Config",
    "GraphQLBackendConfig",
    "PreflightReport",
    "Session",
    "SessionConfig",
    "UploadResult",
    "UploadTask",
]
