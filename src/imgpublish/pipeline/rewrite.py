"""Rewrite note text once all uploads have settled.

Every successfully uploaded reference has its ``source_snippet`` replaced
(every literal occurrence) with ``![<alt>](<remote_url>)``.  References
without a ``remote_url`` are left untouched, so a failed upload never
produces a half-substituted document.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable

from imgpublish.config import PublishConfig
from imgpublish.models import Reference

# A single leading front-matter block delimited by ``---`` lines.
FRONT_MATTER_RE = re.compile(r"^---[\s\S]+?---\n")


def alt_text_for(name: str) -> str:
    """Human-readable alt text derived from a filename.

    The directory and final extension are dropped, and ``-`` / ``_``
    become spaces: ``my-cool_image.png`` -> ``my cool image``.
    """
    stem, _ = posixpath.splitext(posixpath.basename(name))
    return stem.replace("-", " ").replace("_", " ")


def markdown_image(reference: Reference, config: PublishConfig) -> str:
    """The Markdown link that replaces *reference* in the output."""
    alt = alt_text_for(reference.display_name) if config.image_alt_text else ""
    return f"![{alt}]({reference.remote_url})"


def substitute_references(
    text: str,
    references: Iterable[Reference],
    config: PublishConfig,
) -> str:
    """Replace the snippet of every uploaded reference in *text*."""
    for reference in references:
        if not reference.remote_url:
            continue
        text = text.replace(reference.source_snippet, markdown_image(reference, config))
    return text


def strip_front_matter(text: str) -> str:
    """Remove a leading ``---`` delimited front-matter block, if any."""
    return FRONT_MATTER_RE.sub("", text, count=1)


def rewrite(
    text: str,
    references: Iterable[Reference],
    config: PublishConfig,
) -> str:
    """Substitute uploaded references and apply ``ignore_properties``.

    Parameters
    ----------
    text:
        The original note text.
    references:
        References returned by the upload coordinator.
    config:
        Rewriting settings (``image_alt_text``, ``ignore_properties``).

    Returns
    -------
    str
        The text to hand to the publish action.
    """
    text = substitute_references(text, references, config)
    if config.ignore_properties:
        text = strip_front_matter(text)
    return text
