"""Append-only JSONL record of every upload attempt."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from platformdirs import user_state_dir
from pydantic import BaseModel, ValidationError

from vfm.models.audit import AuditLogEntry
from vfm.models.enums import AuditStatus, BackendName
from vfm.models.session import Session
from vfm.models.upload import UploadResult, UploadTask

logger = logging.getLogger(__name__)

APP_NAME = "vtex-files-manager"
LOG_FILE_NAME = "uploads.jsonl"


def default_log_path() -> Path:
    """Per-user state location, e.g. ~/.local/state/vtex-files-manager/uploads.jsonl."""
    return Path(user_state_dir(APP_NAME)) / LOG_FILE_NAME


class AuditLog:
    """Process-wide upload history file.

    Every call opens, writes or reads, and closes the file on its own. No
    handle is kept between calls, so concurrent appends from several
    workers each land as one whole line.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path).expanduser() if path is not None else default_log_path()

    def append(self, entry: AuditLogEntry) -> None:
        """Append one entry as a single JSON line, creating the file as needed."""
        line = entry.model_dump_json() + "\n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    async def append_async(self, entry: AuditLogEntry) -> None:
        await asyncio.to_thread(self.append, entry)

    def read_all(self) -> list[AuditLogEntry]:
        """Return entries in file order, skipping lines that do not parse.

        Lines are parsed from raw bytes, so a line that is not valid UTF-8
        is skipped like any other malformed line. A missing file yields an
        empty list.
        """
        try:
            with self.path.open("rb") as f:
                lines = f.readlines()
        except FileNotFoundError:
            return []

        entries: list[AuditLogEntry] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entries.append(AuditLogEntry.model_validate_json(line))
            except ValidationError:
                logger.debug("Skipping malformed audit line %d in %s", lineno, self.path)
        return entries

    def clear(self) -> None:
        """Delete the log file. No-op if it does not exist."""
        self.path.unlink(missing_ok=True)


def build_entry(
    task: UploadTask,
    result: UploadResult,
    *,
    method: BackendName,
    session: Session,
    timestamp: datetime | None = None,
) -> AuditLogEntry:
    return AuditLogEntry(
        timestamp=timestamp or datetime.now().astimezone(),
        file=task.name,
        path=str(task.path),
        size=task.size,
        method=method,
        account=session.account,
        workspace=session.workspace,
        status=AuditStatus.SUCCESS if result.success else AuditStatus.FAILED,
        url=result.url or "",
        error=result.error_text or "",
    )


async def record_attempt(
    audit_log: AuditLog,
    task: UploadTask,
    result: UploadResult,
    *,
    method: BackendName,
    session: Session,
) -> None:
    """Best-effort append. Write failures are logged and discarded.

    The result is already decided by the time this runs; nothing here can
    change it.
    """
    entry = build_entry(task, result, method=method, session=session)
    try:
        await audit_log.append_async(entry)
    except OSError as exc:
        logger.warning("Failed to write audit log entry for %s: %s", task.name, exc)


class AuditSummary(BaseModel):
    """Totals over a set of audit entries."""

    total: int
    succeeded: int
    failed: int
    by_method: dict[str, int]


def filter_entries(
    entries: Iterable[AuditLogEntry],
    *,
    status: AuditStatus | str | None = None,
    method: BackendName | str | None = None,
    limit: int | None = None,
) -> list[AuditLogEntry]:
    """Filter by status and method. `limit` keeps the most recent entries."""
    filtered = [
        entry
        for entry in entries
        if (not status or entry.status == status) and (not method or entry.method == method)
    ]
    if limit is not None and limit > 0 and len(filtered) > limit:
        filtered = filtered[-limit:]
    return filtered


def summarize_entries(entries: Iterable[AuditLogEntry]) -> AuditSummary:
    entries = list(entries)
    succeeded = sum(1 for e in entries if e.status == AuditStatus.SUCCESS)
    by_method = Counter(str(e.method) for e in entries)
    return AuditSummary(
        total=len(entries),
        succeeded=succeeded,
        failed=len(entries) - succeeded,
        by_method=dict(by_method),
    )
