"""Client module - Remote object store API client."""

from mediaoffload.client.api import (
    APIError,
    AuthenticationError,
    MissingLocalFileError,
    NetworkError,
    NotConfiguredError,
    NotFoundError,
    RemoteStoreClient,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "MissingLocalFileError",
    "NetworkError",
    "NotConfiguredError",
    "NotFoundError",
    "RemoteStoreClient",
]
