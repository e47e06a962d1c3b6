"""Turn a reference's raw target into a storage-relative asset path.

Resolution rules
----------------
``use_relative_path`` off
    Embeds resolve under ``attachment_location`` taken from the vault
    root.  Markdown links are used as written (a leading ``/`` only
    marks them as vault-root paths).
``use_relative_path`` on
    ``attachment_location`` (minus a leading ``./``) is resolved against
    the folder that holds the note.  Markdown links that are not
    absolute are joined to the note's folder.

Every result is normalised so it can be used directly as a lookup key.
"""

from __future__ import annotations

import posixpath

from imgpublish.config import PublishConfig
from imgpublish.models import Reference, ReferenceKind

_EXCALIDRAW_SUFFIX = ".excalidraw"


def normalize_path(path: str) -> str:
    """Normalise a vault path.

    Backslashes become ``/``, redundant separators and ``.``/``..``
    segments are collapsed, and leading/trailing separators are removed.
    The vault root itself is returned as ``"/"``.
    """
    path = path.replace("\\", "/")
    path = posixpath.normpath(path) if path else ""
    path = path.strip("/")
    if path in ("", "."):
        return "/"
    return path


def _join(*parts: str) -> str:
    # Plain concatenation: an absolute later part must not discard the base.
    return "/".join(part for part in parts if part)


def note_directory(note_path: str) -> str:
    """Directory holding *note_path*, ``""`` for notes at the vault root."""
    return posixpath.dirname(note_path.replace("\\", "/"))


def attachment_root(note_path: str, config: PublishConfig) -> str:
    """Folder that embed-syntax images are looked up in."""
    if not config.use_relative_path:
        return config.attachment_location

    location = config.attachment_location
    if location.startswith("./"):
        location = location[2:]
    return _join(note_directory(note_path), location)


def asset_filename(reference: Reference) -> str:
    """Filename stored on disk for *reference*.

    Excalidraw drawings are exported next to the drawing as
    ``<name>.excalidraw.png``; that export is what gets uploaded.
    """
    if reference.kind is ReferenceKind.EMBED and reference.raw_path.endswith(_EXCALIDRAW_SUFFIX):
        return reference.raw_path + ".png"
    return reference.raw_path


def resolve_reference(reference: Reference, note_path: str, config: PublishConfig) -> str:
    """Resolve *reference* to a normalised storage-relative path.

    Parameters
    ----------
    reference:
        A reference produced by the extractor.
    note_path:
        Storage-relative path of the note the reference was found in.
    config:
        Resolution settings.

    Returns
    -------
    str
        The lookup key for the file-storage collaborator.
    """
    if reference.kind is ReferenceKind.EMBED:
        target = _join(attachment_root(note_path, config), asset_filename(reference))
        return normalize_path(target)

    target = reference.raw_path
    if config.use_relative_path and not target.startswith("/"):
        target = _join(note_directory(note_path), target)
    return normalize_path(target)
