"""Directory scanning for upload candidates."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from vfm.errors import DiscoveryError
from vfm.models.upload import UploadTask
from vfm.validation import is_supported

logger = logging.getLogger(__name__)


def discover_files(root: Path, recursive: bool = False) -> list[Path]:
    """List files under `root` with a supported extension.

    Order is whatever the filesystem enumerates; no sorting is applied.
    Directories and unsupported files are skipped silently.

    Raises:
        DiscoveryError: If `root` (or, when recursive, a subdirectory)
            cannot be read.
    """
    root = Path(root)
    if recursive:
        files = _walk(root)
    else:
        files = _list_children(root)
    logger.debug("Discovered %d candidate files under %s", len(files), root)
    return files


def build_tasks(paths: Iterable[Path]) -> list[UploadTask]:
    return [UploadTask.from_path(path) for path in paths]


def _list_children(root: Path) -> list[Path]:
    try:
        entries = list(os.scandir(root))
    except OSError as exc:
        raise DiscoveryError(root, exc) from exc

    files: list[Path] = []
    for entry in entries:
        if entry.is_dir():
            continue
        path = Path(entry.path)
        if is_supported(path):
            files.append(path)
    return files


def _walk(root: Path) -> list[Path]:
    if not root.is_dir():
        # os.walk swallows a missing root, so probe it first.
        try:
            os.scandir(root).close()
        except OSError as exc:
            raise DiscoveryError(root, exc) from exc

    def _raise(exc: OSError) -> None:
        raise DiscoveryError(Path(exc.filename or root), exc) from exc

    files: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for filename in filenames:
            path = Path(dirpath) / filename
            if is_supported(path):
                files.append(path)
    return files
