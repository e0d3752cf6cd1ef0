"""Local size/type policy applied before any network call."""

from __future__ import annotations

from pathlib import Path

from vfm.errors import (
    AccessError,
    EmptyFileError,
    IsDirectoryError,
    NotFoundError,
    TooLargeError,
    UnsupportedTypeError,
)

MAX_FILE_SIZE = 5 * 1024 * 1024

# Accepted by both backends.
UNIVERSAL_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp"})

# Accepted by the cms backend only; graphql rejects them remotely with
# "Invalid file format", which surfaces as an upload failure.
RESTRICTED_EXTENSIONS = frozenset({".bmp", ".pdf", ".txt", ".json", ".css", ".js", ".xml"})

SUPPORTED_EXTENSIONS = UNIVERSAL_EXTENSIONS | RESTRICTED_EXTENSIONS

_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".json": "application/json",
    ".xml": "application/xml",
    ".css": "text/css",
    ".js": "application/javascript",
}
_DEFAULT_MIME_TYPE = "application/octet-stream"


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def mime_type_for(extension: str) -> str:
    """Return the Content-Type sent for a file extension (case-insensitive)."""
    return _MIME_TYPES.get(extension.lower(), _DEFAULT_MIME_TYPE)


def validate_file(path: Path) -> None:
    """Fail closed if `path` may not be uploaded.

    Checks run in a fixed order: existence, directory, size ceiling,
    emptiness, extension. The first failing check raises.

    Raises:
        NotFoundError, AccessError, IsDirectoryError, TooLargeError, EmptyFileError,
        UnsupportedTypeError
    """
    try:
        stat_result = path.stat()
    except FileNotFoundError:
        raise NotFoundError(path) from None
    except OSError as exc:
        raise AccessError(path, exc) from exc

    if path.is_dir():
        raise IsDirectoryError(path)

    size = stat_result.st_size
    if size > MAX_FILE_SIZE:
        raise TooLargeError(path, size, MAX_FILE_SIZE)
    if size == 0:
        raise EmptyFileError(path)

    extension = path.suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedTypeError(path, extension)
