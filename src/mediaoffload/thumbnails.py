"""Thumbnailer interface.

Derivative generation is owned by the host system; the sync engine only
asks for a fresh size mapping before planning uploads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from mediaoffload.store.attachments import Asset, Derivative


class ThumbnailError(Exception):
    """Derivatives could not be generated."""


class Thumbnailer(Protocol):
    """Produces the derivative sizes of an image asset."""

    def generate(self, asset: Asset) -> dict[str, Derivative]:
        """Generate derivatives from the asset's primary file.

        Raises:
            ThumbnailError: If generation failed.
        """
        ...
