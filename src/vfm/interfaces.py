"""Interface definitions for vfm upload backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vfm.models.enums import BackendName
    from vfm.models.upload import UploadResult, UploadTask


class Shutdownable(ABC):
    """Async shutdown interface for managed components."""

    @abstractmethod
    async def shutdown(self, timeout: float | None = None) -> None:
        """Release resources (HTTP sessions)."""
        raise NotImplementedError


class UploadBackend(Shutdownable, ABC):
    """Uploads one file to the remote asset store."""

    name: BackendName

    @abstractmethod
    async def upload(self, task: UploadTask) -> UploadResult:
        """Upload a task and return its result.

        Implementation notes:
        - MUST NOT raise for per-file problems; validation, HTTP and
          transport failures are returned as a failed UploadResult
        - MUST validate the file before any network call
        - Records an audit entry for every attempt that reached the network
        """
        raise NotImplementedError

    @abstractmethod
    def destination_preview(self, file_name: str) -> str:
        """URL the file is expected to land at, for display before uploading."""
        raise NotImplementedError

    async def __aenter__(self) -> UploadBackend:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()


class ExistenceChecker(ABC):
    """Optional capability: report whether a file name already exists remotely.

    Backends without it make the pre-flight gate a no-op.
    """

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Return True if `name` exists at the destination. Raises on failure."""
        raise NotImplementedError
