"""CLI entrypoint for vfm."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, NoReturn

from dotenv import load_dotenv

load_dotenv()

import fire  # type: ignore[import-untyped]

from vfm.app import UploadPlan, auth_expired, create_uploader
from vfm.audit_log import AuditLog, filter_entries, summarize_entries
from vfm.backends import get_backend_names
from vfm.config import ConfigError, load_config_or_default
from vfm.errors import AuthExpiredError, AuthMissingError, VfmError
from vfm.logging_setup import configure_logging
from vfm.models.audit import AuditLogEntry
from vfm.models.config import Config
from vfm.models.enums import AuditStatus
from vfm.models.session import Session
from vfm.models.upload import BatchSummary
from vfm.session import load_session

_FILE_LIST_LIMIT = 10
_EXISTING_LIST_LIMIT = 5
_RELOGIN_HINT = "Please run 'vtex login' and try again."


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for CLI."""
    configure_logging(log_level=level)


def ask_confirmation(prompt: str) -> bool:
    """Prompt for yes/no. Anything but y/yes (or EOF) means no."""
    try:
        response = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return response.strip().lower() in ("y", "yes")


def _fail(message: str) -> NoReturn:
    print(f"✗ {message}", file=sys.stderr)
    sys.exit(1)


def _require_method(method: str) -> str:
    valid = get_backend_names()
    if not method:
        _fail(f"--method flag is required (must be one of: {', '.join(valid)})")
    method = str(method).lower()
    if method not in valid:
        _fail(f"invalid method: {method} (must be one of: {', '.join(valid)})")
    return method


def _load(config: str | None) -> Config:
    try:
        return load_config_or_default(Path(config) if config else None)
    except ConfigError as e:
        _fail(f"Config invalid: {e}")


def _print_header(title: str, session: Session, method: str) -> None:
    print()
    print(f"=== {title} ===")
    print(f"Account:       {session.account}")
    print(f"Workspace:     {session.workspace}")
    print(f"User:          {session.login}")
    print(f"Method:        {method}")


def _print_preflight_warnings(plan: UploadPlan) -> None:
    for warning in plan.preflight.warnings:
        print(f"Warning: {warning}")


class Vfm:
    """vfm - upload and manage files in VTEX accounts using the VTEX CLI session.

    Supported file types:
      - Universal (both methods): jpg, jpeg, png, gif, svg, webp
      - CMS only: bmp, pdf, txt, json, xml, css, js
    Maximum file size: 5MB per file
    """

    def upload(
        self,
        file: str,
        method: str = "",
        yes: bool = False,
        config: str | None = None,
        log_level: str = "INFO",
    ) -> None:
        """Upload a single file.

        Args:
            file: Path to the file
            method: Upload method: graphql or cms (required)
            yes: Skip the confirmation prompt
            config: Optional YAML config file (defaults to $VFM_CONFIG)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        setup_logging(log_level)
        method = _require_method(method)
        cfg = _load(config)
        session = _load_session(cfg)

        def confirm(plan: UploadPlan) -> bool:
            task = plan.tasks[0]
            _print_header("VTEX File Upload", session, method)
            print(f"File:          {task.name} ({task.size / 1024:.2f} KB)")
            print(f"Destination:   {plan.destination}")
            _print_preflight_warnings(plan)
            if plan.preflight.has_existing:
                print("\n⚠️  WARNING: File already exists and will be OVERWRITTEN!")
            print()
            if yes:
                return True
            prompt = (
                "File exists. Overwrite?" if plan.preflight.has_existing else "Proceed with upload?"
            )
            if not ask_confirmation(prompt):
                print("Upload cancelled.")
                return False
            return True

        async def _run() -> None:
            async with create_uploader(method, config=cfg, session=session) as uploader:
                result = await uploader.upload_single(Path(file), confirm)
            if result is None:
                return
            if not result.success:
                hint = f" {_RELOGIN_HINT}" if isinstance(result.error, AuthExpiredError) else ""
                _fail(f"Upload failed: {result.error_text}{hint}")
            print("✓ Upload successful!")
            print(f"File URL: {result.url}")

        _run_async(_run())

    def batch(
        self,
        directory: str,
        method: str = "",
        concurrent: int | None = None,
        recursive: bool | None = None,
        yes: bool = False,
        config: str | None = None,
        log_level: str = "INFO",
    ) -> None:
        """Upload every supported file in a directory.

        Args:
            directory: Directory to scan
            method: Upload method: graphql or cms (required)
            concurrent: Number of concurrent uploads (default from config: 3)
            recursive: Also scan subdirectories
            yes: Skip the confirmation prompt
            config: Optional YAML config file (defaults to $VFM_CONFIG)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        setup_logging(log_level)
        method = _require_method(method)
        cfg = _load(config)
        if concurrent is not None and int(concurrent) < 1:
            _fail(f"--concurrent must be >= 1, got {concurrent}")
        session = _load_session(cfg)
        workers = int(concurrent) if concurrent is not None else cfg.batch.workers

        def confirm(plan: UploadPlan) -> bool:
            _print_header("VTEX Batch Upload", session, method)
            print(f"Directory:     {directory}")
            print(
                f"Files found:   {len(plan.tasks)} "
                f"({plan.total_size / (1024 * 1024):.2f} MB total)"
            )
            print(f"Concurrency:   {workers} workers")
            print()
            print("Files to upload:")
            for index, task in enumerate(plan.tasks[:_FILE_LIST_LIMIT], start=1):
                print(f"  {index}. {task.name} ({task.size / 1024:.2f} KB)")
            if len(plan.tasks) > _FILE_LIST_LIMIT:
                print(f"  ... ({len(plan.tasks) - _FILE_LIST_LIMIT} more)")
            print()
            _print_preflight_warnings(plan)
            existing = plan.preflight.existing
            if existing:
                print(f"⚠️  WARNING: {len(existing)} file(s) already exist and will be OVERWRITTEN:")
                for name in existing[:_EXISTING_LIST_LIMIT]:
                    print(f"  • {name}")
                if len(existing) > _EXISTING_LIST_LIMIT:
                    print(f"  ... and {len(existing) - _EXISTING_LIST_LIMIT} more")
                print()
            if yes:
                return True
            prompt = (
                f"{len(existing)} file(s) will be overwritten. Continue?"
                if existing
                else "Proceed with upload?"
            )
            if not ask_confirmation(prompt):
                print("Upload cancelled.")
                return False
            return True

        async def _run() -> None:
            async with create_uploader(method, config=cfg, session=session) as uploader:
                summary = await uploader.upload_batch(
                    Path(directory), recursive=recursive, workers=workers, confirm=confirm
                )
            if summary is None:
                return
            if summary.total == 0:
                print(f"No supported files found in {directory}")
                return
            print_batch_summary(summary)

        _run_async(_run())

    def logs(
        self,
        limit: int = 50,
        status: str = "",
        method: str = "",
        clear: bool = False,
        yes: bool = False,
        config: str | None = None,
    ) -> None:
        """View (or clear) the upload history.

        Args:
            limit: Maximum number of entries to display (most recent)
            status: Filter by status: success or failed
            method: Filter by upload method: graphql or cms
            clear: Delete all logs (asks for confirmation unless --yes)
            yes: Skip the confirmation prompt for --clear
            config: Optional YAML config file (defaults to $VFM_CONFIG)
        """
        cfg = _load(config)
        audit_log = AuditLog(cfg.audit.path)
        if status and status not in {s.value for s in AuditStatus}:
            _fail(f"invalid status: {status} (must be success or failed)")

        entries = audit_log.read_all()
        if clear:
            _clear_logs(audit_log, len(entries), yes)
            return

        if not entries:
            print("No upload logs found.")
            print(f"\nLog file location: {audit_log.path}")
            return

        filtered = filter_entries(entries, status=status or None, method=method or None)
        if not filtered:
            print("No entries match the specified filters.")
            print(f"\nTotal entries in log: {len(entries)}")
            print(f"Log file location: {audit_log.path}")
            return

        shown = filter_entries(filtered, limit=limit)
        print()
        print("=== VTEX Upload Logs ===")
        suffix = " (filtered)" if status or method else ""
        print(f"Showing {len(shown)} of {len(entries)} entries{suffix}")
        print(f"Log file: {audit_log.path}")
        print()
        for index, entry in enumerate(shown, start=1):
            print_log_entry(index, entry)

        summary = summarize_entries(filtered)
        print("=== Summary ===")
        print(f"Total:         {summary.total} uploads")
        print(f"Successful:    {summary.succeeded}")
        print(f"Failed:        {summary.failed}")
        print(f"CMS uploads:   {summary.by_method.get('cms', 0)}")
        print(f"GraphQL:       {summary.by_method.get('graphql', 0)}")
        print()


def print_batch_summary(summary: BatchSummary) -> None:
    print()
    print("=== Upload Summary ===")
    print(f"Total files:     {summary.total}")
    print(f"Successful:      {summary.succeeded}")
    print(f"Failed:          {summary.failed}")
    print()
    if summary.failures:
        print("Failed uploads:")
        for result in summary.failures:
            print(f"  • {result.file_name}: {result.error_text}")
        print()
    if auth_expired(summary.results):
        print(f"Some uploads were rejected because the session expired. {_RELOGIN_HINT}")


def print_log_entry(index: int, entry: AuditLogEntry) -> None:
    mark = "✓ SUCCESS" if entry.status == AuditStatus.SUCCESS else "✗ FAILED"
    print(f"[{index}] {entry.timestamp:%Y-%m-%d %H:%M:%S} | {mark}")
    print(f"    File:      {entry.file} ({entry.size / 1024:.2f} KB)")
    if entry.path:
        print(f"    Path:      {entry.path}")
    print(f"    Method:    {entry.method}")
    print(f"    Account:   {entry.account}")
    print(f"    Workspace: {entry.workspace}")
    if entry.status == AuditStatus.SUCCESS and entry.url:
        print(f"    URL:       {entry.url}")
    elif entry.status == AuditStatus.FAILED and entry.error:
        print(f"    Error:     {entry.error}")
    print()


def _clear_logs(audit_log: AuditLog, count: int, yes: bool) -> None:
    if count == 0:
        print("No logs to clear.")
        return
    print("\n⚠️  WARNING: This will permanently delete all upload logs!")
    print(f"Log file: {audit_log.path}")
    print(f"Total entries: {count}\n")
    if not yes and not ask_confirmation("Are you sure you want to clear all logs?"):
        print("Operation cancelled.")
        return
    try:
        audit_log.clear()
    except OSError as e:
        _fail(f"failed to clear logs: {e}")
    print("✓ Logs cleared successfully!")


def _load_session(cfg: Config) -> Session:
    try:
        return load_session(cfg.session)
    except AuthMissingError as e:
        _fail(str(e))


def _run_async(coro: Coroutine[Any, Any, None]) -> None:
    try:
        asyncio.run(coro)
    except VfmError as e:
        _fail(str(e))
    except KeyboardInterrupt:
        pass


def main() -> None:
    """Main CLI entrypoint."""
    # Strip --help/-h when it's the only arg so Fire shows its commands list
    if len(sys.argv) == 2 and sys.argv[1] in ("--help", "-h"):
        sys.argv.pop()
    fire.Fire(Vfm)


if __name__ == "__main__":
    main()
