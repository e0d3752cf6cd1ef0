"""Mock implementations for testing."""

from tests.vfm.mocks.backend import MockBackend, MockUploadOnlyBackend
from tests.vfm.mocks.http import FakeHttpSession, FakeResponse

__all__ = [
    "FakeHttpSession",
    "FakeResponse",
    "MockBackend",
    "MockUploadOnlyBackend",
]
