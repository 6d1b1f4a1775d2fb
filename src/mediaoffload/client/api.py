"""HTTP client for the remote object store API.

This module provides:
- RemoteStoreClient: authenticated upload/delete/connection-test calls
- APIError and subclasses: classified failures of those calls
- Public URL construction from the cached site domain
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any

import httpx

from mediaoffload.core.config import RemoteConfig
from mediaoffload.core.types import PRIMARY_SIZE

logger = logging.getLogger(__name__)

USER_AGENT = "mediaoffload/1.0"


class APIError(Exception):
    """Base exception for API errors (remote rejection)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotConfiguredError(APIError):
    """Credentials are missing; no request was made."""


class AuthenticationError(APIError):
    """Credentials were rejected by the remote store."""


class NotFoundError(APIError):
    """Resource not found."""


class NetworkError(APIError):
    """Connection-level failure (DNS, refused, timeout, TLS)."""


class MissingLocalFileError(APIError):
    """Local file to upload does not exist; no request was made."""


def _error_message(response: httpx.Response) -> str:
    """Extract a readable error message from a response body."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        for key in ("message", "detail"):
            if data.get(key):
                return str(data[key])
    return response.text


class RemoteStoreClient:
    """HTTP client for the remote object store."""

    def __init__(self, config: RemoteConfig) -> None:
        """Initialize the client.

        Args:
            config: Remote store configuration.
        """
        self._config = config
        self._domain = config.domain
        self._client = httpx.Client(
            base_url=config.api_base_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> RemoteStoreClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    @property
    def config(self) -> RemoteConfig:
        """Configuration this client was built with."""
        return self._config

    @property
    def domain(self) -> str:
        """Cached public-facing domain, empty until resolved."""
        return self._domain

    def is_configured(self) -> bool:
        """Check that site id and API key are both set."""
        return self._config.is_configured

    def _require_configured(self) -> None:
        if not self.is_configured():
            raise NotConfiguredError("Remote store credentials not configured.")

    def _site_path(self, *parts: str) -> str:
        return "/".join(["/api/sites", self._config.site_id, *parts])

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, converting transport failures to NetworkError."""
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"{type(e).__name__}: {e}") from e

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise the appropriate exception for a non-2xx response."""
        if response.is_success:
            return response
        message = _error_message(response)
        if response.status_code == 401:
            raise AuthenticationError(
                f"API Error 401: {message or 'Invalid API key'}", 401
            )
        if response.status_code == 404:
            raise NotFoundError(f"API Error 404: {message or 'Not found'}", 404)
        raise APIError(
            f"API Error {response.status_code}: {message}", response.status_code
        )

    # === Connection ===

    def test_connection(self) -> str:
        """Check credentials and resolve the public domain.

        Returns:
            The resolved domain (empty if the server did not report one).

        Raises:
            NotConfiguredError: If credentials are missing.
            NetworkError: If the server is unreachable.
            APIError: If the server rejected the request.
        """
        self._require_configured()
        try:
            response = self._handle_response(self._request("GET", self._site_path()))
        except APIError as e:
            logger.error(f"Connection test failed: {e}")
            raise

        try:
            data = response.json()
        except ValueError:
            data = {}
        domain = data.get("domain") if isinstance(data, dict) else None
        if domain:
            self._domain = str(domain)
            logger.debug(f"Resolved remote domain: {self._domain}")
        else:
            logger.warning("Connection test succeeded but no domain was returned")
        return self._domain

    def health_check(self) -> bool:
        """Check if the remote store is reachable with these credentials.

        Returns:
            True if the connection test succeeded.
        """
        try:
            self.test_connection()
        except APIError:
            return False
        return True

    # === Files ===

    def relative_path(self, file_path: Path | str) -> str:
        """Path of a file relative to the upload root, POSIX style.

        Files outside the upload root keep their full path minus the
        leading slash.
        """
        path = Path(file_path)
        try:
            relative = path.resolve().relative_to(self._config.upload_root.resolve())
        except ValueError:
            return path.as_posix().lstrip("/")
        return relative.as_posix()

    def upload(self, file_path: Path | str, size_name: str = PRIMARY_SIZE) -> str:
        """Upload a file as multipart form data.

        Args:
            file_path: Local file to upload.
            size_name: Logical size name, used for logging.

        Returns:
            Remote identifier of the uploaded file ("" if none was returned).

        Raises:
            NotConfiguredError: If credentials are missing.
            MissingLocalFileError: If the file does not exist.
            NetworkError: If the server is unreachable.
            APIError: If the server rejected the upload.
        """
        self._require_configured()
        path = Path(file_path)
        if not path.is_file():
            logger.error(f"Upload - File not found: {path}")
            raise MissingLocalFileError(f"File not found: {path}")

        relative = self.relative_path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        logger.debug(f"Uploading {size_name} {relative} ({content_type})")

        with path.open("rb") as fh:
            response = self._request(
                "POST",
                self._site_path("media"),
                files={"file": (path.name, fh, content_type)},
                data={"file_path": relative},
                timeout=self._config.upload_timeout,
            )
        try:
            self._handle_response(response)
        except APIError as e:
            logger.error(f"Upload failed for {relative}: {e}")
            raise

        try:
            data = response.json()
        except ValueError:
            return ""
        if isinstance(data, dict) and data.get("id") is not None:
            return str(data["id"])
        return ""

    def delete(self, remote_id: str) -> None:
        """Delete a remote file.

        Any failure means "not deleted, retry later".

        Args:
            remote_id: Remote identifier returned by upload.

        Raises:
            ValueError: If remote_id is empty.
            NotConfiguredError: If credentials are missing.
            NetworkError: If the server is unreachable.
            APIError: If the server rejected the delete.
        """
        if not remote_id:
            raise ValueError("remote_id must not be empty")
        self._require_configured()
        try:
            self._handle_response(
                self._request("DELETE", self._site_path("media", remote_id))
            )
        except APIError as e:
            logger.error(f"Delete failed for {remote_id}: {e}")
            raise

    def public_url_for(self, file_path: Path | str) -> str:
        """Build the public URL of an uploaded file.

        Resolves the domain with one connection test when it is not cached.

        Returns:
            The public URL, or "" if the domain cannot be resolved.
        """
        if not self._domain:
            try:
                self.test_connection()
            except APIError:
                return ""
        if not self._domain:
            return ""
        parts = [self._config.cdn_base_url, self._domain]
        if self._config.public_path_prefix:
            parts.append(self._config.public_path_prefix)
        parts.append(self.relative_path(file_path))
        return "/".join(parts)
