"""Storage backend contract.

The pipeline depends on a backend only through :class:`StorageBackend`.
Backends raise :class:`~imgpublish.errors.UploadError` subclasses (or any
backend-specific exception) on failure; the upload coordinator turns
each failure into a per-reference warning.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """A remote object store images are published to."""

    async def upload(self, content: bytes, filename_hint: str, mime_type: str) -> str:
        """Store *content* and return its public URL.

        Parameters
        ----------
        content:
            Raw asset bytes.
        filename_hint:
            Original filename, used to derive the destination key.
        mime_type:
            MIME type to declare for the stored object.
        """
        ...
