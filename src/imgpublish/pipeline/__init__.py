"""Image reference pipeline: extract, resolve, upload, rewrite.

Exports
-------
extract_references
    Find embed and Markdown-link image references in note text.
resolve_reference
    Turn a reference into a storage-relative asset path.
UploadCoordinator
    Upload every located asset concurrently and collect the successes.
rewrite / substitute_references / strip_front_matter
    Produce the final text from the uploaded references.
generate_name
    Expand a destination-key template.
detect_mime
    MIME type for an upload payload.
"""

from .coordinator import UploadCoordinator
from .extract import extract_references
from .mime import detect_mime
from .naming import generate_name
from .resolve import normalize_path, resolve_reference
from .rewrite import alt_text_for, rewrite, strip_front_matter, substitute_references

__all__ = [
    "UploadCoordinator",
    "alt_text_for",
    "detect_mime",
    "extract_references",
    "generate_name",
    "normalize_path",
    "resolve_reference",
    "rewrite",
    "strip_front_matter",
    "substitute_references",
]
