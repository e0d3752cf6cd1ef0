"""Name-keyed registry of upload backend classes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar, cast

from pydantic import BaseModel

from vfm.audit_log import AuditLog
from vfm.interfaces import UploadBackend
from vfm.models.config import Config
from vfm.models.session import Session

logger = logging.getLogger(__name__)


class BackendPlugin(Protocol):
    """Structure every registered backend class provides."""

    config_cls: type[BaseModel]

    @classmethod
    def create(cls, session: Session, config: Any, audit_log: AuditLog) -> UploadBackend: ...


_BACKENDS: dict[str, type[BackendPlugin]] = {}

T = TypeVar("T", bound=type)


def backend(name: str) -> Callable[[T], T]:
    """Decorator to register a class as an upload backend.

    Usage:
        @backend("cms")
        class CmsFilePickerBackend(UploadBackend): ...

    Raises:
        TypeError: If the class lacks `config_cls` or `create`
        ValueError: If `name` is already registered
    """

    def decorator(cls: T) -> T:
        if not hasattr(cls, "config_cls"):
            raise TypeError(f"Backend class {cls.__name__} must define 'config_cls'")
        if not hasattr(cls, "create"):
            raise TypeError(f"Backend class {cls.__name__} must define 'create' classmethod")
        key = str(name).lower()
        if key in _BACKENDS:
            raise ValueError(
                f"Upload backend '{key}' is already registered. Backend names must be unique."
            )
        _BACKENDS[key] = cast(type[BackendPlugin], cls)
        logger.debug("Registered upload backend: %s", key)
        return cls

    return decorator


def get_backend_names() -> list[str]:
    return sorted(_BACKENDS)


def create_backend(
    name: str, *, session: Session, config: Config, audit_log: AuditLog
) -> UploadBackend:
    """Instantiate the backend registered under `name`.

    Backend settings come from the same-named section of `config`
    (e.g. `config.cms`), or the backend's defaults when there is none.

    Raises:
        ValueError: If no backend is registered under `name`
    """
    key = str(name).lower()
    if key not in _BACKENDS:
        available = ", ".join(get_backend_names())
        raise ValueError(f"Unknown upload backend: '{name}'. Available: {available}")

    plugin_cls = _BACKENDS[key]
    specific_config = getattr(config, key, None)
    if specific_config is None:
        specific_config = plugin_cls.config_cls()
    return plugin_cls.create(session, specific_config, audit_log)
