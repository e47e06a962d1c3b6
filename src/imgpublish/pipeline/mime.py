"""MIME type detection for upload payloads.

Sniffs the first bytes of the payload and falls back to the filename
extension.  Anything unrecognised is sent as
``application/octet-stream``.
"""

from __future__ import annotations

import mimetypes

_FALLBACK_MIME = "application/octet-stream"

# Map of magic bytes to MIME types for sniffing.
_MAGIC_BYTES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),  # RIFF....WEBP (check further)
    (b"<svg", "image/svg+xml"),
    (b"<?xml", "image/svg+xml"),
]

_EXTENSION_MIMES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def sniff_mime(data: bytes) -> str | None:
    """Detect the MIME type from the leading bytes of *data*."""
    for magic, mime in _MAGIC_BYTES:
        if data[:len(magic)] == magic:
            if magic == b"RIFF" and data[8:12] != b"WEBP":
                continue
            return mime
    return None


def mime_from_filename(filename: str) -> str | None:
    """Guess the MIME type from the extension of *filename*."""
    dot = filename.rfind(".")
    if dot != -1:
        known = _EXTENSION_MIMES.get(filename[dot:].lower())
        if known:
            return known
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type


def detect_mime(data: bytes, filename: str) -> str:
    """MIME type to declare when uploading *data* named *filename*."""
    return sniff_mime(data) or mime_from_filename(filename) or _FALLBACK_MIME
