"""Upload path shared by every backend."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from vfm.audit_log import AuditLog, record_attempt
from vfm.errors import (
    AuthExpiredError,
    FileValidationError,
    UploadRejectedError,
    VfmError,
)
from vfm.models.enums import BackendName
from vfm.models.session import Session
from vfm.models.upload import UploadResult, UploadTask
from vfm.validation import validate_file

logger = logging.getLogger(__name__)

AUTH_HEADER = "VtexIdclientAutCookie"

SendFn = Callable[[UploadTask, bytes], Awaitable[str]]


def auth_headers(session: Session) -> dict[str, str]:
    # The VTEX CLI token doubles as the VtexIdclientAutCookie value.
    return {AUTH_HEADER: session.token}


def check_status(status: int, body: str) -> None:
    """Map a non-2xx HTTP status to the error taxonomy.

    Raises:
        AuthExpiredError: On 401/403
        UploadRejectedError: On any other non-2xx status
    """
    if 200 <= status < 300:
        return
    if status in (401, 403):
        raise AuthExpiredError(
            f"authentication failed (HTTP {status}): your VTEX session has expired. "
            "Please run 'vtex login' and try again"
        )
    raise UploadRejectedError(f"upload failed with status {status}: {body}", status=status)


def parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise UploadRejectedError(
            f"failed to parse response: {exc} (body: {body})", cause=exc
        ) from exc


def new_http_session(timeout_s: float) -> aiohttp.ClientSession:
    return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout_s))


async def post_text(
    http: aiohttp.ClientSession, url: str, **kwargs: Any
) -> tuple[int, str]:
    """POST and return (status, body text)."""
    async with http.post(url, **kwargs) as response:
        return response.status, await response.text()


async def perform_upload(
    task: UploadTask,
    *,
    method: BackendName,
    session: Session,
    audit_log: AuditLog,
    send: SendFn,
) -> UploadResult:
    """Validate, read, send, then record.

    `send` performs the backend-specific network exchange and returns the
    public URL, raising a VfmError on rejection. Validation and local read
    failures return before any network call and are not audited.
    """
    try:
        validate_file(task.path)
    except FileValidationError as exc:
        logger.warning("Validation failed for %s: %s", task.name, exc)
        return UploadResult.failed(task.name, exc)

    try:
        content = await asyncio.to_thread(task.path.read_bytes)
    except OSError as exc:
        logger.warning("Failed to read %s: %s", task.path, exc)
        return UploadResult.failed(task.name, exc)

    try:
        url = await send(task, content)
    except VfmError as exc:
        result = UploadResult.failed(task.name, exc)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        error = UploadRejectedError(f"request failed: {exc or type(exc).__name__}", cause=exc)
        result = UploadResult.failed(task.name, error)
    else:
        result = UploadResult.ok(task.name, url)

    if result.success:
        logger.info("Uploaded %s via %s -> %s", task.name, method, result.url)
    else:
        logger.warning("Upload failed for %s: %s", task.name, result.error_text)

    await record_attempt(audit_log, task, result, method=method, session=session)
    return result
