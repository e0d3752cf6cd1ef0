"""Error hierarchy for vfm upload stages."""

from __future__ import annotations

from pathlib import Path


class VfmError(Exception):
    """Base exception for all upload errors.

    Compatible with error-as-value pattern: instances are stored on
    UploadResult instead of raised across task boundaries. Preserves stack
    traces via exception chaining.
    """

    code = "VFM_ERROR"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause  # Python's exception chaining


class FileValidationError(VfmError):
    """Local pre-flight check rejected a file. Never retried."""

    code = "FILE_INVALID"

    def __init__(self, message: str, path: Path, cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)
        self.path = path


class NotFoundError(FileValidationError):
    code = "NOT_FOUND"

    def __init__(self, path: Path) -> None:
        super().__init__(f"file does not exist: {path}", path)


class AccessError(FileValidationError):
    """Stat failed for a reason other than the file being absent."""

    code = "ACCESS_FAILED"

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"failed to access file: {cause}", path, cause=cause)


class IsDirectoryError(FileValidationError):
    code = "IS_DIRECTORY"

    def __init__(self, path: Path) -> None:
        super().__init__(f"path is a directory, not a file: {path}", path)


class TooLargeError(FileValidationError):
    code = "TOO_LARGE"

    def __init__(self, path: Path, size: int, limit: int) -> None:
        super().__init__(
            f"file size ({size} bytes) exceeds maximum allowed size "
            f"({limit} bytes / {limit // (1024 * 1024)}MB)",
            path,
        )
        self.size = size
        self.limit = limit


class EmptyFileError(FileValidationError):
    code = "EMPTY"

    def __init__(self, path: Path) -> None:
        super().__init__(f"file is empty: {path}", path)


class UnsupportedTypeError(FileValidationError):
    code = "UNSUPPORTED_TYPE"

    def __init__(self, path: Path, extension: str) -> None:
        super().__init__(
            f"unsupported file type: {extension or '(none)'} "
            "(images: jpg, jpeg, png, gif, svg, webp, bmp; "
            "docs: pdf, txt, json, xml; web: css, js)",
            path,
        )
        self.extension = extension


class AuthMissingError(VfmError):
    """No usable session. Fix by running `vtex login`."""

    code = "AUTH_MISSING"


class AuthExpiredError(VfmError):
    """A backend rejected the session token mid-operation."""

    code = "AUTH_EXPIRED"

    def __init__(self, message: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(
            message
            or "authentication failed: your VTEX session has expired. "
            "Please run 'vtex login' and try again",
            cause=cause,
        )


class UploadRejectedError(VfmError):
    """Backend declined this specific file. Does not abort siblings."""

    code = "UPLOAD_REJECTED"

    def __init__(
        self, message: str, status: int | None = None, cause: Exception | None = None
    ) -> None:
        super().__init__(message, cause=cause)
        self.status = status


class DiscoveryError(VfmError):
    """Local filesystem failure while listing a directory."""

    code = "IO_ERROR"

    def __init__(self, directory: Path, cause: Exception) -> None:
        super().__init__(f"failed to read directory {directory}: {cause}", cause=cause)
        self.directory = directory
