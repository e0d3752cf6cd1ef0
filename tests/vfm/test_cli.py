"""Tests for CLI module."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import yaml

from tests.vfm.mocks import MockBackend
from vfm.app import Uploader
from vfm.audit_log import AuditLog
from vfm.cli import Vfm, ask_confirmation, main, print_batch_summary, setup_logging
from vfm.errors import AuthExpiredError, AuthMissingError
from vfm.models.audit import AuditLogEntry
from vfm.models.config import BatchConfig, Config
from vfm.models.enums import AuditStatus, BackendName
from vfm.models.session import Session
from vfm.models.upload import BatchSummary, UploadResult


@pytest.fixture(autouse=True)
def no_logging_setup() -> Iterator[None]:
    with patch("vfm.cli.configure_logging"):
        yield


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def wired(session: Session, backend: MockBackend) -> Iterator[MockBackend]:
    """Patch session loading and backend creation to use the mock backend."""

    def _create(method: str, *, config: Config, session: Session) -> Uploader:
        return Uploader(backend, Config(batch=BatchConfig(delay_s=0)))

    with (
        patch("vfm.cli.load_session", return_value=session),
        patch("vfm.cli.create_uploader", side_effect=_create),
    ):
        yield backend


def _entry(name: str, status: AuditStatus, method: BackendName, minute: int) -> AuditLogEntry:
    failed = status == AuditStatus.FAILED
    return AuditLogEntry(
        timestamp=datetime(2025, 10, 23, 12, minute, tzinfo=timezone.utc),
        file=name,
        path=f"/tmp/{name}",
        size=2048,
        method=method,
        account="acme",
        workspace="master",
        status=status,
        url="" if failed else f"https://acme.vtexassets.com/arquivos/{name}",
        error="upload failed: nope" if failed else "",
    )


@pytest.fixture
def log_config(tmp_path: Path) -> tuple[str, AuditLog]:
    """YAML config pointing the audit log into tmp_path."""
    log_path = tmp_path / "uploads.jsonl"
    config_path = tmp_path / "vfm.yaml"
    config_path.write_text(yaml.dump({"audit": {"path": str(log_path)}}))
    return str(config_path), AuditLog(log_path)


class TestSetupLogging:
    def test_configures_logging_with_custom_level(self) -> None:
        with patch("vfm.cli.configure_logging") as mock_configure:
            setup_logging("DEBUG")

        mock_configure.assert_called_once_with(log_level="DEBUG")


class TestAskConfirmation:
    @pytest.mark.parametrize(
        ("answer", "expected"), [("y", True), ("YES", True), ("", False), ("n", False)]
    )
    def test_answers(self, answer: str, expected: bool) -> None:
        with patch("builtins.input", return_value=answer):
            assert ask_confirmation("Proceed?") is expected

    def test_eof_is_no(self) -> None:
        with patch("builtins.input", side_effect=EOFError):
            assert ask_confirmation("Proceed?") is False


class TestUpload:
    def test_method_is_required(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            Vfm().upload("logo.png")

        assert exc_info.value.code == 1
        assert "--method flag is required" in capsys.readouterr().err

    def test_invalid_method(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            Vfm().upload("logo.png", method="ftp")

        assert "invalid method: ftp (must be one of: cms, graphql)" in capsys.readouterr().err

    def test_upload_with_yes_prints_url(
        self,
        wired: MockBackend,
        make_file: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        # Given: A valid file
        path = make_file("logo.png")

        # When: Uploading without prompting
        Vfm().upload(str(path), method="cms", yes=True)

        # Then: Header, destination and result URL shown
        out = capsys.readouterr().out
        assert "Account:       acme" in out
        assert "Destination:   https://mock.example/logo.png" in out
        assert "✓ Upload successful!" in out
        assert "File URL: https://mock.example/logo.png" in out
        assert wired.uploaded == ["logo.png"]

    def test_existing_file_asks_to_overwrite(
        self,
        session: Session,
        make_file: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        # Given: The name already exists remotely and the user declines
        backend = MockBackend(existing={"logo.png"})
        prompts: list[str] = []

        def _input(prompt: str) -> str:
            prompts.append(prompt)
            return "n"

        with (
            patch("vfm.cli.load_session", return_value=session),
            patch("vfm.cli.create_uploader", return_value=Uploader(backend)),
            patch("builtins.input", side_effect=_input),
        ):
            # When: Uploading
            Vfm().upload(str(make_file("logo.png")), method="cms")

        # Then: Overwrite warning, overwrite prompt, nothing sent
        out = capsys.readouterr().out
        assert "OVERWRITTEN" in out
        assert "Upload cancelled." in out
        assert prompts == ["File exists. Overwrite? [y/N]: "]
        assert backend.uploaded == []

    def test_validation_failure_exits(
        self,
        wired: MockBackend,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            Vfm().upload(str(tmp_path / "missing.png"), method="cms", yes=True)

        assert exc_info.value.code == 1
        assert "file does not exist" in capsys.readouterr().err
        assert wired.events == []

    def test_unstatable_path_exits_cleanly(
        self,
        wired: MockBackend,
        make_file: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = make_file("a.png") / "b.png"

        with pytest.raises(SystemExit) as exc_info:
            Vfm().upload(str(path), method="cms", yes=True)

        assert exc_info.value.code == 1
        assert "✗ failed to access file" in capsys.readouterr().err
        assert wired.events == []

    def test_missing_session_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("vfm.cli.load_session", side_effect=AuthMissingError("no VTEX session found")),
            pytest.raises(SystemExit),
        ):
            Vfm().upload("logo.png", method="cms")

        assert "✗ no VTEX session found" in capsys.readouterr().err

    def test_rejected_upload_exits_with_reason(
        self,
        session: Session,
        make_file: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        backend = MockBackend(reject={"logo.png"})
        with (
            patch("vfm.cli.load_session", return_value=session),
            patch("vfm.cli.create_uploader", return_value=Uploader(backend)),
            pytest.raises(SystemExit),
        ):
            Vfm().upload(str(make_file("logo.png")), method="cms", yes=True)

        assert "Upload failed: rejected by mock" in capsys.readouterr().err


class TestBatch:
    def test_batch_prints_plan_and_summary(
        self,
        wired: MockBackend,
        make_file: Callable[..., Path],
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        # Given: Two images in a directory
        make_file("a.png")
        make_file("b.png")

        # When: Running a batch without prompting
        Vfm().batch(str(tmp_path / "files"), method="graphql", concurrent=2, yes=True)

        # Then: Plan and summary printed
        out = capsys.readouterr().out
        assert "Files found:   2" in out
        assert "Concurrency:   2 workers" in out
        assert "Total files:     2" in out
        assert "Successful:      2" in out
        assert sorted(wired.uploaded) == ["a.png", "b.png"]

    def test_empty_directory(
        self,
        wired: MockBackend,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "empty").mkdir()

        Vfm().batch(str(tmp_path / "empty"), method="cms")

        assert "No supported files found" in capsys.readouterr().out

    def test_concurrent_below_one_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            Vfm().batch("dir", method="cms", concurrent=0)

        assert "--concurrent must be >= 1" in capsys.readouterr().err

    def test_declined_batch_uploads_nothing(
        self,
        wired: MockBackend,
        make_file: Callable[..., Path],
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        make_file("a.png")

        with patch("builtins.input", return_value="no"):
            Vfm().batch(str(tmp_path / "files"), method="cms")

        assert "Upload cancelled." in capsys.readouterr().out
        assert wired.uploaded == []


class TestBatchSummary:
    def test_lists_failures_and_relogin_hint(self, capsys: pytest.CaptureFixture[str]) -> None:
        summary = BatchSummary(
            results=[
                UploadResult.ok("a.png", "https://x/a.png"),
                UploadResult.failed("b.png", AuthExpiredError()),
            ]
        )

        print_batch_summary(summary)

        out = capsys.readouterr().out
        assert "Failed:          1" in out
        assert "• b.png:" in out
        assert "vtex login" in out


class TestLogs:
    def test_no_logs(
        self, log_config: tuple[str, AuditLog], capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, _ = log_config

        Vfm().logs(config=config)

        assert "No upload logs found." in capsys.readouterr().out

    def test_shows_filtered_entries_and_summary(
        self, log_config: tuple[str, AuditLog], capsys: pytest.CaptureFixture[str]
    ) -> None:
        # Given: Three entries across methods and statuses
        config, audit_log = log_config
        audit_log.append(_entry("a.png", AuditStatus.SUCCESS, BackendName.CMS, 1))
        audit_log.append(_entry("b.png", AuditStatus.FAILED, BackendName.CMS, 2))
        audit_log.append(_entry("c.png", AuditStatus.SUCCESS, BackendName.GRAPHQL, 3))

        # When: Showing only successes
        Vfm().logs(status="success", config=config)

        # Then: Two entries, with URLs, and a filtered summary
        out = capsys.readouterr().out
        assert "Showing 2 of 3 entries (filtered)" in out
        assert "URL:       https://acme.vtexassets.com/arquivos/a.png" in out
        assert "b.png" not in out
        assert "Total:         2 uploads" in out
        assert "GraphQL:       1" in out

    def test_limit_keeps_most_recent(
        self, log_config: tuple[str, AuditLog], capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, audit_log = log_config
        for minute, name in enumerate(["old.png", "mid.png", "new.png"]):
            audit_log.append(_entry(name, AuditStatus.SUCCESS, BackendName.CMS, minute))

        Vfm().logs(limit=1, config=config)

        out = capsys.readouterr().out
        assert "new.png" in out
        assert "old.png" not in out

    def test_invalid_status_exits(
        self, log_config: tuple[str, AuditLog], capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, _ = log_config

        with pytest.raises(SystemExit):
            Vfm().logs(status="pending", config=config)

        assert "invalid status: pending" in capsys.readouterr().err

    def test_clear_with_confirmation(
        self, log_config: tuple[str, AuditLog], capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, audit_log = log_config
        audit_log.append(_entry("a.png", AuditStatus.SUCCESS, BackendName.CMS, 1))

        with patch("builtins.input", return_value="y"):
            Vfm().logs(clear=True, config=config)

        assert "✓ Logs cleared successfully!" in capsys.readouterr().out
        assert audit_log.read_all() == []
        assert not audit_log.path.exists()

    def test_clear_declined_keeps_logs(
        self, log_config: tuple[str, AuditLog], capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, audit_log = log_config
        audit_log.append(_entry("a.png", AuditStatus.SUCCESS, BackendName.CMS, 1))

        with patch("builtins.input", return_value="n"):
            Vfm().logs(clear=True, config=config)

        assert "Operation cancelled." in capsys.readouterr().out
        assert len(audit_log.read_all()) == 1


class TestMain:
    def test_lone_help_flag_is_stripped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["vfm", "--help"])
        captured: dict[str, Any] = {}

        def _fire(component: Any) -> None:
            captured["argv"] = list(sys.argv)
            captured["component"] = component

        with patch("vfm.cli.fire.Fire", side_effect=_fire):
            main()

        assert captured["argv"] == ["vfm"]
        assert captured["component"] is Vfm
