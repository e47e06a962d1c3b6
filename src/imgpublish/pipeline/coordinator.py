"""Upload coordinator.

Locates each reference's asset, reads it, and starts its upload right
away so that all uploads of one document overlap.  The coordinator then
waits for every upload to settle.

Failure handling
----------------
* A reference whose asset cannot be found stops the loop: a warning is
  emitted and no later reference is enqueued.  Uploads already started
  still run to completion and are substituted.
* An asset that exists but cannot be read is reported like a failed
  upload and skipped; the loop continues with the next reference.
* A failed upload only drops its own reference.  The failure is
  reported with the reference's path and the backend's message; sibling
  uploads are unaffected.
"""

from __future__ import annotations

import asyncio
import posixpath
import time
from collections.abc import Sequence

from imgpublish.backends.base import StorageBackend
from imgpublish.config import NOTICE_WARNING_DURATION_MS, PublishConfig
from imgpublish.errors import (
    AssetNotFoundError,
    ErrorCode,
    ImgPublishError,
    UploadTimeoutError,
)
from imgpublish.host import FileStorage, Notifier
from imgpublish.models import PublishWarning, Reference, UploadRequest
from imgpublish.observability import NoopMetricsHook, get_logger
from imgpublish.pipeline.mime import detect_mime
from imgpublish.pipeline.resolve import resolve_reference

log = get_logger("imgpublish.coordinator")


def _error_text(exc: BaseException) -> str:
    if isinstance(exc, ImgPublishError):
        return exc.message
    return str(exc) or type(exc).__name__


class UploadCoordinator:
    """Drive the concurrent uploads of one ``process`` call.

    Parameters
    ----------
    storage:
        File-storage collaborator used to locate and read assets.
    backend:
        The storage backend receiving uploads.
    notifier:
        Where missing-asset and upload-failure notices are sent.
    config:
        Resolution settings and the optional per-upload timeout.
    """

    def __init__(
        self,
        storage: FileStorage,
        backend: StorageBackend,
        notifier: Notifier,
        config: PublishConfig,
    ) -> None:
        self._storage = storage
        self._backend = backend
        self._notifier = notifier
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self.warnings: list[PublishWarning] = []

    async def run(self, references: Sequence[Reference], note_path: str) -> list[Reference]:
        """Upload every reference's asset.

        Parameters
        ----------
        references:
            References from the extractor, in source order.
        note_path:
            Storage-relative path of the note being processed.

        Returns
        -------
        list[Reference]
            The successfully uploaded subset, in source order, each with
            ``resolved_path`` and ``remote_url`` set.
        """
        self.warnings = []
        tasks: list[asyncio.Task[Reference | None]] = []

        try:
            for reference in references:
                reference.resolved_path = resolve_reference(reference, note_path, self._config)

                if not await self._storage.exists(reference.resolved_path):
                    # Stops enqueueing: later references are not uploaded either.
                    self._report_missing(reference)
                    break

                try:
                    content = await self._storage.read_binary(reference.resolved_path)
                except Exception as exc:
                    self._report_failure(reference, exc)
                    continue

                request = self._build_request(reference, content)
                tasks.append(asyncio.create_task(self._upload_one(request)))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        results = await asyncio.gather(*tasks)
        return [ref for ref in results if ref is not None]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_request(self, reference: Reference, content: bytes) -> UploadRequest:
        filename = posixpath.basename(reference.resolved_path)
        return UploadRequest(
            reference=reference,
            content=content,
            filename_hint=filename,
            mime_type=detect_mime(content, filename),
        )

    async def _upload_one(self, request: UploadRequest) -> Reference | None:
        reference = request.reference
        t0 = time.monotonic()
        try:
            url = await self._call_backend(request)
        except Exception as exc:
            self._report_failure(reference, exc)
            return None

        elapsed_ms = (time.monotonic() - t0) * 1000
        reference.remote_url = url
        self._metrics.increment("imgpublish.upload_success_total")
        self._metrics.timing("imgpublish.upload_duration_ms", elapsed_ms)
        log.info(
            "Upload complete",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "resolved_path": reference.resolved_path,
                    "url": url,
                    "duration_ms": round(elapsed_ms, 1),
                }
            },
        )
        return reference

    async def _call_backend(self, request: UploadRequest) -> str:
        upload = self._backend.upload(request.content, request.filename_hint, request.mime_type)
        timeout = self._config.upload_timeout_seconds
        if timeout is None:
            return await upload
        try:
            return await asyncio.wait_for(upload, timeout)
        except asyncio.TimeoutError as exc:
            raise UploadTimeoutError(
                message=f"timed out after {timeout}s",
                context={
                    "resolved_path": request.reference.resolved_path,
                    "timeout_seconds": timeout,
                },
                cause=exc,
            ) from exc

    def _report_missing(self, reference: Reference) -> None:
        error = AssetNotFoundError(
            message=(
                f"Can NOT locate {reference.display_name} with {reference.resolved_path}, "
                "please check the image path or the attachment location setting!"
            ),
            context={"name": reference.display_name, "resolved_path": reference.resolved_path},
        )
        self._metrics.increment("imgpublish.asset_missing_total")
        log.warning(
            "Asset not found",
            extra={"extra_fields": {"op": "locate", **error.context}},
        )
        self._warn(ErrorCode.ASSET_NOT_FOUND.value, error.message, error.context)

    def _report_failure(self, reference: Reference, exc: Exception) -> None:
        detail = _error_text(exc)
        self._metrics.increment(
            "imgpublish.upload_failure_total",
            tags={"error": type(exc).__name__},
        )
        log.warning(
            "Upload failed",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "resolved_path": reference.resolved_path,
                    "error": detail,
                }
            },
        )
        self._warn(
            ErrorCode.UPLOAD_FAILED.value,
            f"Upload {reference.resolved_path} failed, remote server returned an error: {detail}",
            {"resolved_path": reference.resolved_path, "error": detail},
        )

    def _warn(self, code: str, message: str, context: dict) -> None:
        self.warnings.append(PublishWarning(code=code, message=message, context=context))
        self._notifier.notify(message, NOTICE_WARNING_DURATION_MS)
