"""Destination key generation.

A template such as ``blog/{year}/{mon}/{filename}`` is expanded into the
object key a backend stores an upload under.  Supported placeholders:

``{year}`` ``{mon}`` ``{day}``
    Current date, month and day zero padded.
``{timestamp}``
    Milliseconds since the epoch.
``{random}``
    Twenty random alphanumeric characters.
``{filename}``
    The original filename.

Expansion is deterministic unless ``{timestamp}`` or ``{random}`` is
used.  The result never starts with ``/``: keys are relative to the
bucket root.
"""

from __future__ import annotations

import random
import string
from datetime import datetime

_RANDOM_ALPHABET = string.ascii_letters + string.digits
_RANDOM_LENGTH = 20


def random_id(length: int = _RANDOM_LENGTH, rng: random.Random | None = None) -> str:
    """Random alphanumeric string used for the ``{random}`` placeholder."""
    chooser = rng or random
    return "".join(chooser.choice(_RANDOM_ALPHABET) for _ in range(length))


def generate_name(
    template: str,
    filename: str,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """Expand *template* into a destination key for *filename*.

    Parameters
    ----------
    template:
        Key template.  A blank template yields *filename* unchanged.
    filename:
        Original filename of the asset (no directories).
    now:
        Clock override for the date placeholders.
    rng:
        Random source override for ``{random}``.

    Returns
    -------
    str
        The bucket-relative destination key.
    """
    if not template or not template.strip():
        return filename.lstrip("/")

    now = now or datetime.now()
    key = template
    if "{year}" in key:
        key = key.replace("{year}", f"{now.year:04d}")
    if "{mon}" in key:
        key = key.replace("{mon}", f"{now.month:02d}")
    if "{day}" in key:
        key = key.replace("{day}", f"{now.day:02d}")
    if "{timestamp}" in key:
        key = key.replace("{timestamp}", str(int(now.timestamp() * 1000)))
    if "{random}" in key:
        key = key.replace("{random}", random_id(rng=rng))
    key = key.replace("{filename}", filename)

    return key.lstrip("/")
