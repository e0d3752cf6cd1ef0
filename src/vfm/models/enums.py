"""Centralized enums for type safety and IDE support."""

from enum import StrEnum


class BackendName(StrEnum):
    """Upload backends selectable at runtime."""

    CMS = "cms"
    GRAPHQL = "graphql"


class AuditStatus(StrEnum):
    """Outcome recorded for one upload attempt."""

    SUCCESS = "success"
    FAILED = "failed"
