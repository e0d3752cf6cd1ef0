"""Upload orchestration: discovery, validation, pre-flight, confirmation, upload."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from vfm.audit_log import AuditLog
from vfm.backends import create_backend
from vfm.discovery import build_tasks, discover_files
from vfm.errors import AuthExpiredError
from vfm.interfaces import UploadBackend
from vfm.models.config import Config
from vfm.models.session import Session
from vfm.models.upload import BatchSummary, PreflightReport, UploadResult, UploadTask
from vfm.preflight import check_existing
from vfm.scheduler import run_batch
from vfm.session import load_session
from vfm.validation import validate_file

logger = logging.getLogger(__name__)


class UploadPlan(BaseModel):
    """What is about to be uploaded, shown to the caller for confirmation."""

    model_config = ConfigDict(frozen=True)

    tasks: list[UploadTask]
    preflight: PreflightReport
    destination: str | None = None

    @property
    def total_size(self) -> int:
        return sum(task.size for task in self.tasks)


ConfirmFn = Callable[[UploadPlan], bool]


def _always_confirm(plan: UploadPlan) -> bool:
    _ = plan
    return True


def auth_expired(results: list[UploadResult]) -> bool:
    """True if any result failed because the session was rejected."""
    return any(isinstance(r.error, AuthExpiredError) for r in results)


class Uploader:
    """Runs single-file and directory uploads against one backend.

    The caller owns confirmation: every `upload_*` call builds a plan
    (including which names already exist remotely) and hands it to
    `confirm` before any upload request is sent.
    """

    def __init__(self, backend: UploadBackend, config: Config | None = None) -> None:
        self.backend = backend
        self._config = config or Config()

    async def __aenter__(self) -> Uploader:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.backend.shutdown()

    async def plan_single(self, path: Path) -> UploadPlan:
        """Validate one file and check whether its name is already taken.

        Raises:
            FileValidationError: If the file fails local validation
        """
        path = Path(path)
        validate_file(path)
        task = UploadTask.from_path(path)
        report = await check_existing(self.backend, [task.name])
        return UploadPlan(
            tasks=[task],
            preflight=report,
            destination=self.backend.destination_preview(task.name),
        )

    async def upload_single(
        self, path: Path, confirm: ConfirmFn = _always_confirm
    ) -> UploadResult | None:
        """Upload one file. Returns None if `confirm` declines."""
        plan = await self.plan_single(path)
        if not confirm(plan):
            logger.info("Upload cancelled: %s", plan.tasks[0].name)
            return None
        return await self.backend.upload(plan.tasks[0])

    async def plan_batch(self, directory: Path, recursive: bool | None = None) -> UploadPlan:
        """Discover candidate files and check which names already exist.

        Raises:
            DiscoveryError: If the directory cannot be read
        """
        if recursive is None:
            recursive = self._config.batch.recursive
        tasks = build_tasks(discover_files(Path(directory), recursive=recursive))
        report = await check_existing(self.backend, [task.name for task in tasks])
        return UploadPlan(tasks=tasks, preflight=report)

    async def upload_batch(
        self,
        directory: Path,
        *,
        recursive: bool | None = None,
        workers: int | None = None,
        confirm: ConfirmFn = _always_confirm,
    ) -> BatchSummary | None:
        """Upload every supported file in `directory`.

        Returns an empty summary without asking when nothing is found, and
        None if `confirm` declines.
        """
        plan = await self.plan_batch(directory, recursive)
        if not plan.tasks:
            logger.info("No supported files found in %s", directory)
            return BatchSummary(results=[])
        if not confirm(plan):
            logger.info("Batch upload cancelled: %s", directory)
            return None
        return await self.run_tasks(plan.tasks, workers=workers)

    async def run_tasks(
        self, tasks: list[UploadTask], *, workers: int | None = None
    ) -> BatchSummary:
        batch = self._config.batch
        results = await run_batch(
            tasks,
            self.backend,
            workers=workers if workers is not None else batch.workers,
            delay_s=batch.delay_s,
        )
        summary = BatchSummary(results=results)
        logger.info(
            "Batch finished: total=%d succeeded=%d failed=%d",
            summary.total,
            summary.succeeded,
            summary.failed,
        )
        return summary


def create_uploader(
    backend_name: str,
    *,
    config: Config | None = None,
    session: Session | None = None,
    audit_log: AuditLog | None = None,
) -> Uploader:
    """Wire session, audit log and backend into an Uploader.

    Raises:
        AuthMissingError: If no session is given and none can be loaded
        ValueError: If `backend_name` is unknown
    """
    config = config or Config()
    if session is None:
        session = load_session(config.session)
    if audit_log is None:
        audit_log = AuditLog(config.audit.path)
    backend = create_backend(backend_name, session=session, config=config, audit_log=audit_log)
    logger.debug("Using %s backend for account %s", backend_name, session.account)
    return Uploader(backend, config)
