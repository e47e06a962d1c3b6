"""Configuration for imgpublish.

Two dataclasses capture every tuneable knob:

* :class:`PublishConfig` -- how references are resolved and how the
  document is rewritten.  Read-only for the duration of a run.
* :class:`R2Config` -- credentials and destination settings for the
  Cloudflare R2 storage backend.

Instances are passed explicitly to every resolving, uploading and
rewriting call; nothing in the package reads ambient settings.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Recognised image extensions
# ---------------------------------------------------------------------------

IMAGE_EXTENSIONS: tuple[str, ...] = (
    "png",
    "jpg",
    "jpeg",
    "gif",
    "svg",
    "webp",
    "excalidraw",
)
"""Extensions accepted by both reference syntaxes."""

NOTICE_WARNING_DURATION_MS: int = 10_000
"""Display duration for missing-asset and upload-failure notifications."""


def _mask(value: str) -> str:
    return f"...{value[-4:]}" if len(value) >= 8 else "****"


# ---------------------------------------------------------------------------
# Pipeline configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PublishConfig:
    """Settings consumed by the resolver, coordinator and rewriter.

    Parameters
    ----------
    attachment_location:
        Folder that embed-syntax images (``![[pic.png]]``) live in.  Taken
        from the vault root unless *use_relative_path* is set, in which
        case it is resolved against the note's folder (a leading ``./``
        is ignored).
    use_relative_path:
        Resolve the attachment folder and relative Markdown links against
        the directory of the note being processed.
    image_alt_text:
        Derive alt text from the image filename (``-`` and ``_`` become
        spaces).  When off the rewritten links carry an empty alt text.
    replace_original_doc:
        Write the rewritten text back into the document before the
        publish action runs.
    ignore_properties:
        Strip a leading front-matter block from the text handed to the
        publish action.  The document itself keeps its front matter.
    upload_timeout_seconds:
        Per-upload timeout.  ``None`` waits for the backend indefinitely.
    metrics:
        Optional :class:`~imgpublish.observability.MetricsHook`.
    """

    attachment_location: str = "/"

    use_relative_path: bool = False

    image_alt_text: bool = True

    replace_original_doc: bool = False

    ignore_properties: bool = False

    upload_timeout_seconds: float | None = None

    metrics: Any | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.upload_timeout_seconds is not None and self.upload_timeout_seconds <= 0:
            raise ValueError(
                f"upload_timeout_seconds must be > 0, got {self.upload_timeout_seconds}"
            )


# ---------------------------------------------------------------------------
# R2 backend configuration
# ---------------------------------------------------------------------------

@dataclass
class R2Config:
    """Settings for :class:`~imgpublish.backends.r2.R2Backend`.

    Parameters
    ----------
    account_id:
        Cloudflare account id.  Used to derive *endpoint* when that is
        left empty.
    access_key_id / secret_access_key:
        R2 API token credentials.  Never logged.
    bucket_name:
        Destination bucket.
    path_template:
        Destination key template, see
        :func:`~imgpublish.pipeline.naming.generate_name`.
    custom_domain_name:
        Public hostname mapped to the bucket.  When empty, URLs point at
        the bucket's ``r2.dev`` subdomain.
    endpoint:
        S3 API endpoint override (e.g. for testing).
    """

    account_id: str = ""

    access_key_id: str = ""

    secret_access_key: str = ""

    bucket_name: str = ""

    path_template: str = ""

    custom_domain_name: str = ""

    endpoint: str = ""

    region: str = "auto"

    # ── HTTP / retry ────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    retry_max_attempts: int = 3

    retry_base_delay: float = 1.0

    retry_max_delay: float = 30.0

    retry_jitter: bool = True

    def __post_init__(self) -> None:
        if not self.endpoint:
            if not self.account_id:
                raise ValueError("account_id is required when endpoint is not set")
            self.endpoint = f"https://{self.account_id}.r2.cloudflarestorage.com"
        self.endpoint = self.endpoint.rstrip("/")

        if not self.bucket_name:
            raise ValueError("bucket_name is required")
        if not self.access_key_id or not self.secret_access_key:
            raise ValueError("access_key_id and secret_access_key are required")

        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    def __repr__(self) -> str:
        """Mask credentials to prevent accidental leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name in ("access_key_id", "secret_access_key"):
                parts.append(f"{f.name}='{_mask(val)}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"R2Config({', '.join(parts)})"
