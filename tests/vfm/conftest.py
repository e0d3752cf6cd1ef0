"""Shared pytest fixtures for vfm tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

# Add src to sys.path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path.resolve()) not in sys.path:
    sys.path.insert(0, str(src_path.resolve()))

import pytest

from vfm.audit_log import AuditLog
from vfm.models.session import Session


@pytest.fixture
def session() -> Session:
    return Session(
        account="acme",
        workspace="master",
        login="dev@acme.com",
        token="tok-" + "x" * 32,
    )


@pytest.fixture
def audit_log(tmp_path: Path) -> AuditLog:
    return AuditLog(tmp_path / "state" / "uploads.jsonl")


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Create a file under tmp_path/files with `size` bytes of content."""

    def _make(name: str, size: int = 10 * 1024, directory: Path | None = None) -> Path:
        base = directory or (tmp_path / "files")
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x89" * size)
        return path

    return _make
