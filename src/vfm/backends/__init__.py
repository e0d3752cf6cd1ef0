"""Upload backends and registry."""

from vfm.backends.registry import backend, create_backend, get_backend_names

# Import built-in backends so they register themselves.
from vfm.backends.cms import CmsFilePickerBackend  # noqa: E402
from vfm.backends.graphql import GraphQLUploadBackend  # noqa: E402

__all__ = [
    "CmsFilePickerBackend",
    "GraphQLUploadBackend",
    "backend",
    "create_backend",
    "get_backend_names",
]
