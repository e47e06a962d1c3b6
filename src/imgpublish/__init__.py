"""imgpublish: upload a note's local images and rewrite it to remote URLs.

Public re-exports
-----------------

* **Processor:** :class:`ImageTagProcessor`
* **Configuration:** :class:`PublishConfig`, :class:`R2Config`
* **Backends:** :class:`StorageBackend`, :class:`R2Backend`
* **Host collaborators:** protocols plus local implementations
* **Errors:** Every :class:`ImgPublishError` subclass and :class:`ErrorCode`
* **Models:** references, warnings, results and enums

Usage::

    from imgpublish import ImageTagProcessor, PublishConfig

See :mod:`imgpublish.processor` for a complete example.
"""

from __future__ import annotations

# ── Backends ────────────────────────────────────────────────────────────
from imgpublish.backends import R2Backend, StorageBackend

# ── Configuration ───────────────────────────────────────────────────────
from imgpublish.config import IMAGE_EXTENSIONS, PublishConfig, R2Config

# ── Errors ──────────────────────────────────────────────────────────────
from imgpublish.errors import (
    AssetNotFoundError,
    ErrorCode,
    ImgPublishError,
    InvalidActionError,
    RetryExhaustedError,
    UploadError,
    UploadRejectedError,
    UploadTimeoutError,
    UploadTransportError,
)

# ── Host collaborators ──────────────────────────────────────────────────
from imgpublish.host import (
    Clipboard,
    Document,
    FileDocument,
    FileStorage,
    LocalVaultStorage,
    LogNotifier,
    Notifier,
    StreamClipboard,
)

# ── Models ──────────────────────────────────────────────────────────────
from imgpublish.models import (
    Action,
    PublishResult,
    PublishWarning,
    Reference,
    ReferenceKind,
    UploadRequest,
)

# ── Processor ───────────────────────────────────────────────────────────
from imgpublish.processor import ACTION_PUBLISH, ImageTagProcessor

__all__ = [
    # Processor
    "ImageTagProcessor",
    "ACTION_PUBLISH",
    # Configuration
    "PublishConfig",
    "R2Config",
    "IMAGE_EXTENSIONS",
    # Backends
    "StorageBackend",
    "R2Backend",
    # Host collaborators
    "Clipboard",
    "Document",
    "FileStorage",
    "Notifier",
    "FileDocument",
    "LocalVaultStorage",
    "LogNotifier",
    "StreamClipboard",
    # Errors
    "ImgPublishError",
    "ErrorCode",
    "InvalidActionError",
    "AssetNotFoundError",
    "UploadError",
    "UploadRejectedError",
    "UploadTransportError",
    "UploadTimeoutError",
    "RetryExhaustedError",
    # Models
    "Action",
    "PublishResult",
    "PublishWarning",
    "Reference",
    "ReferenceKind",
    "UploadRequest",
]
