"""Data models shared across the imgpublish pipeline.

All types are plain dataclasses.  A :class:`Reference` lives for a single
``process`` call: the extractor creates it, the resolver fills in
``resolved_path``, the coordinator fills in ``remote_url`` and the
rewriter consumes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ReferenceKind(str, Enum):
    """Which syntax an image reference was written in."""

    EMBED = "embed"
    """Wiki-style embed: ``![[name.png]]`` or ``![[name.png|300]]``."""

    MARKDOWN_LINK = "markdown_link"
    """Standard Markdown image: ``![alt](path/to/name.png)``."""


class Action(str, Enum):
    """Closed set of actions :meth:`ImageTagProcessor.process` accepts."""

    PUBLISH = "PUBLISH"
    """Hand the rewritten text to the clipboard and confirm."""


# ---------------------------------------------------------------------------
# Pipeline records
# ---------------------------------------------------------------------------

@dataclass
class Reference:
    """One image mention discovered in the source text.

    Attributes
    ----------
    kind:
        The syntax family the mention was matched by.
    display_name:
        The image name as written (embed target, or the basename of a
        Markdown link path after percent-decoding).
    raw_path:
        The unresolved target exactly as matched.  Markdown link targets
        are percent-decoded.
    source_snippet:
        The exact matched substring, used as the replacement anchor.
    start:
        Offset of *source_snippet* in the text it was extracted from.
    resolved_path:
        Storage-relative path of the binary asset, set by the resolver.
    remote_url:
        Public URL of the uploaded asset, set by the coordinator.
    """

    kind: ReferenceKind
    display_name: str
    raw_path: str
    source_snippet: str
    start: int = 0
    resolved_path: str = ""
    remote_url: str = ""


@dataclass
class UploadRequest:
    """A reference paired with its payload, owned by one upload call."""

    reference: Reference
    content: bytes
    filename_hint: str
    mime_type: str


@dataclass
class PublishWarning:
    """A non-fatal issue encountered while publishing.

    Attributes
    ----------
    code:
        Machine-readable code (``"ASSET_NOT_FOUND"``, ``"UPLOAD_FAILED"``).
    message:
        The user-visible notification text.
    context:
        Structured diagnostics (``name``, ``resolved_path``, ``error``).
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class PublishResult:
    """Outcome of one :meth:`ImageTagProcessor.process` call.

    Attributes
    ----------
    text:
        The text handed to the action (front matter stripped when
        ``ignore_properties`` is set).
    uploaded:
        References whose upload succeeded, each carrying ``remote_url``.
    references_found:
        Number of references the extractor reported.
    warnings:
        Missing-asset and upload-failure warnings, in the order they
        were raised.
    """

    text: str
    uploaded: list[Reference] = field(default_factory=list)
    references_found: int = 0
    warnings: list[PublishWarning] = field(default_factory=list)
