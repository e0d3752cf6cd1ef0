"""Pre-flight overwrite detection."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import aiohttp

from vfm.errors import VfmError
from vfm.interfaces import ExistenceChecker, UploadBackend
from vfm.models.upload import PreflightReport

logger = logging.getLogger(__name__)


async def check_existing(backend: UploadBackend, names: Iterable[str]) -> PreflightReport:
    """Report which `names` already exist at the destination.

    Backends without an existence check yield `checked=False` and nothing
    existing. A failed check for one name is a warning and that name is
    treated as absent; this function never raises for check failures.
    """
    if not isinstance(backend, ExistenceChecker):
        return PreflightReport(checked=False)

    existing: list[str] = []
    warnings: list[str] = []
    for name in names:
        try:
            found = await backend.exists(name)
        except (VfmError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            message = f"could not check if {name} exists: {exc or type(exc).__name__}"
            logger.warning("Existence check failed: %s", message)
            warnings.append(message)
            continue
        if found:
            existing.append(name)

    return PreflightReport(checked=True, existing=existing, warnings=warnings)
