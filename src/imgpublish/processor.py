"""Publish a note: upload its local images and hand off the rewritten text.

:class:`ImageTagProcessor` wires the pipeline to the host collaborators.

Usage::

    import asyncio
    from imgpublish import (
        FileDocument, ImageTagProcessor, LocalVaultStorage, LogNotifier,
        PublishConfig, R2Backend, R2Config, StreamClipboard,
    )

    async def main():
        async with R2Backend(R2Config(...)) as backend:
            processor = ImageTagProcessor(
                document=FileDocument("~/vault", "notes/post.md"),
                storage=LocalVaultStorage("~/vault"),
                backend=backend,
                clipboard=StreamClipboard(),
                notifier=LogNotifier(),
                config=PublishConfig(attachment_location="assets"),
            )
            await processor.process("PUBLISH")

    asyncio.run(main())
"""

from __future__ import annotations

from imgpublish.backends.base import StorageBackend
from imgpublish.config import PublishConfig
from imgpublish.errors import InvalidActionError
from imgpublish.host import Clipboard, Document, FileStorage, Notifier
from imgpublish.models import Action, PublishResult
from imgpublish.observability import NoopMetricsHook, get_logger
from imgpublish.pipeline.coordinator import UploadCoordinator
from imgpublish.pipeline.extract import extract_references
from imgpublish.pipeline.rewrite import strip_front_matter, substitute_references

log = get_logger("imgpublish.processor")

ACTION_PUBLISH = Action.PUBLISH.value


def _parse_action(action: str | Action) -> Action:
    try:
        return Action(action)
    except ValueError as exc:
        raise InvalidActionError(
            message=f"invalid action: {action!r}",
            context={"action": action, "allowed": [a.value for a in Action]},
            cause=exc,
        ) from exc


class ImageTagProcessor:
    """Upload the images referenced by the active note and publish it.

    Parameters
    ----------
    document:
        The active note.  Read once at the start, written at most once.
    storage:
        File storage holding the referenced assets.
    backend:
        Where images are uploaded.
    clipboard:
        Receives the final text for the publish action.
    notifier:
        User-visible notices.
    config:
        Pipeline settings, read-only for the duration of a call.

    Concurrent ``process`` calls on one processor are not supported;
    callers must serialise them.
    """

    def __init__(
        self,
        document: Document,
        storage: FileStorage,
        backend: StorageBackend,
        clipboard: Clipboard,
        notifier: Notifier,
        config: PublishConfig | None = None,
    ) -> None:
        self._document = document
        self._storage = storage
        self._backend = backend
        self._clipboard = clipboard
        self._notifier = notifier
        self._config = config or PublishConfig()
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )

    @property
    def config(self) -> PublishConfig:
        return self._config

    async def process(self, action: str | Action) -> PublishResult | None:
        """Run the pipeline for *action*.

        Parameters
        ----------
        action:
            One of :class:`~imgpublish.models.Action`.

        Returns
        -------
        PublishResult | None
            ``None`` when there is no active document (a notice is
            shown); otherwise the published text and upload outcome.

        Raises
        ------
        InvalidActionError
            If *action* is not a supported action.  Raised before any
            upload starts.
        """
        parsed = _parse_action(action)

        note_path = self._document.get_active_document_path()
        if not note_path:
            self._notifier.notify("No active file")
            return None

        text = self._document.get_current_text()
        references = extract_references(text)
        self._metrics.increment("imgpublish.references_found_total", len(references))
        log.info(
            "References extracted",
            extra={
                "extra_fields": {
                    "op": "extract",
                    "note_path": note_path,
                    "references": len(references),
                }
            },
        )

        coordinator = UploadCoordinator(
            self._storage, self._backend, self._notifier, self._config,
        )
        uploaded = await coordinator.run(references, note_path)

        value = substitute_references(text, uploaded, self._config)
        if self._config.replace_original_doc:
            self._document.set_current_text(value)
        if self._config.ignore_properties:
            value = strip_front_matter(value)

        if parsed is Action.PUBLISH:
            await self._clipboard.write_text(value)
            self._notifier.notify("Copied to clipboard")

        log.info(
            "Publish complete",
            extra={
                "extra_fields": {
                    "op": "process",
                    "action": parsed.value,
                    "note_path": note_path,
                    "uploaded": len(uploaded),
                    "warnings": len(coordinator.warnings),
                }
            },
        )
        return PublishResult(
            text=value,
            uploaded=uploaded,
            references_found=len(references),
            warnings=list(coordinator.warnings),
        )
