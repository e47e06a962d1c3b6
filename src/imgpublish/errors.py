"""Full error hierarchy for imgpublish.

Every public error class inherits from ImgPublishError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Errors that concern a single image reference (missing asset, failed
upload) are absorbed by the upload coordinator and surfaced as warnings.
An unknown action concerns the whole run and propagates to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error imgpublish can raise."""

    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    UPLOAD_ERROR = "UPLOAD_ERROR"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    UPLOAD_REJECTED = "UPLOAD_REJECTED"
    UPLOAD_TRANSPORT_ERROR = "UPLOAD_TRANSPORT_ERROR"
    UPLOAD_TIMEOUT = "UPLOAD_TIMEOUT"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ImgPublishError(Exception):
    """Base exception for all imgpublish errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A user-facing description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Run-level errors
# ---------------------------------------------------------------------------

class InvalidActionError(ImgPublishError):
    """``process`` was called with an action outside the supported set.

    Context keys: ``action``, ``allowed``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ACTION,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Per-reference errors
# ---------------------------------------------------------------------------

class AssetNotFoundError(ImgPublishError):
    """The resolved path of a reference does not exist in file storage.

    Context keys: ``name``, ``resolved_path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.ASSET_NOT_FOUND,
            message=message,
            context=context,
            cause=cause,
        )


class UploadError(ImgPublishError):
    """Base class for storage-backend upload errors."""

    def __init__(
        self,
        code: str = ErrorCode.UPLOAD_ERROR,
        message: str = "Upload error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class UploadRejectedError(UploadError):
    """The backend answered with a non-retryable error status.

    Context keys: ``status_code``, ``backend_code``, ``key``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UPLOAD_REJECTED,
            message=message,
            context=context,
            cause=cause,
        )


class UploadTransportError(UploadError):
    """A network-level failure (DNS, connection reset, timeout) after
    retries were exhausted.

    Context keys: ``url``, ``attempt``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UPLOAD_TRANSPORT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class UploadTimeoutError(UploadError):
    """A single upload exceeded ``PublishConfig.upload_timeout_seconds``.

    Context keys: ``resolved_path``, ``timeout_seconds``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UPLOAD_TIMEOUT,
            message=message,
            context=context,
            cause=cause,
        )


class RetryExhaustedError(UploadError):
    """All retry attempts were used up on retryable backend statuses.

    Context keys: ``attempts``, ``last_status_code``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.RETRY_EXHAUSTED,
            message=message,
            context=context,
            cause=cause,
        )
