"""Image reference extraction.

Two independent patterns are matched against the raw note text:

* **Embed syntax** -- ``![[name.png]]``, with an optional ``|...`` size
  suffix that is ignored.
* **Markdown link syntax** -- ``![alt](path/name.png)``.  Targets that
  already point at ``http://`` or ``https://`` are skipped; everything
  else is percent-decoded.

Only the extensions in :data:`~imgpublish.config.IMAGE_EXTENSIONS` are
recognised.  Both families are matched independently and the results
are merged by their position in the text.  A span matched by both
families is reported twice.
"""

from __future__ import annotations

import posixpath
import re
from urllib.parse import unquote

from imgpublish.config import IMAGE_EXTENSIONS
from imgpublish.models import Reference, ReferenceKind

_EXT = "|".join(IMAGE_EXTENSIONS)

# ![[name.ext]] or ![[name.ext|300x200]]
EMBED_RE = re.compile(
    r"!\[\[(?P<name>[^\[\]|\n]*?\.(?P<ext>" + _EXT + r"))(?:\|[^\[\]\n]*)?\]\]"
)

# ![alt](path.ext) -- the target may hold one level of balanced parentheses.
MARKDOWN_RE = re.compile(
    r"!\[(?P<alt>[^\]\n]*)\]"
    r"\((?P<path>(?:[^()\n]|\([^()\n]*\))*?\.(?P<ext>" + _EXT + r"))\)"
)

_REMOTE_PREFIXES = ("http://", "https://")


def _extract_embeds(text: str) -> list[Reference]:
    return [
        Reference(
            kind=ReferenceKind.EMBED,
            display_name=match.group("name"),
            raw_path=match.group("name"),
            source_snippet=match.group(0),
            start=match.start(),
        )
        for match in EMBED_RE.finditer(text)
    ]


def _extract_markdown_links(text: str) -> list[Reference]:
    references: list[Reference] = []
    for match in MARKDOWN_RE.finditer(text):
        target = match.group("path")
        if target.startswith(_REMOTE_PREFIXES):
            continue
        decoded = unquote(target)
        references.append(
            Reference(
                kind=ReferenceKind.MARKDOWN_LINK,
                display_name=posixpath.basename(decoded),
                raw_path=decoded,
                source_snippet=match.group(0),
                start=match.start(),
            )
        )
    return references


def extract_references(text: str) -> list[Reference]:
    """Find every local image reference in *text*.

    Parameters
    ----------
    text:
        Raw note content.

    Returns
    -------
    list[Reference]
        References in source order.  ``resolved_path`` and
        ``remote_url`` are left empty.
    """
    if not text:
        return []

    references = _extract_embeds(text) + _extract_markdown_links(text)
    references.sort(key=lambda ref: ref.start)
    return references
